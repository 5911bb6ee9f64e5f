"""Pacote do proxy Alertmanager -> AWS SNS (mensagens multi-protocolo).

Este pacote contém:
- constants: variáveis de ambiente e valores padrão
- utils: configuração de logging e helpers
- models: validação do payload do webhook do Alertmanager
- renderer: templates jinja2 por protocolo (default, email, sms)
- envelope: montagem do envelope JSON e do subject
- services: integração com o SNS (boto3) e classificação de erros
- publisher: política de retry da publicação
- dispatcher: orquestração de uma requisição
- controller: criação do Flask app e endpoints
"""

__version__ = "1.0.0"
