"""Pacote do relay GitLab/release notifier -> Lark.

Este pacote contém:
- constants: variáveis de ambiente e tabelas de emoji/cor
- utils: helpers de formatação (truncamento, menções, listas de env)
- verification: verificação do token compartilhado do GitLab
- events: parse do corpo do webhook do GitLab em eventos tipados
- cards: primitivas de card interativo do Lark
- templates: geração dos cards por tipo de evento
- services: envio para o webhook do bot Lark (assinatura + POST)
- controller: criação do Flask app e endpoints
"""
