"""
Adapter Django.

Apps:
- pessoas: cadastro de membros, visitantes e registros dependentes
- lgpd: solicitações, logs, tokens de verificação e API JSON
"""
