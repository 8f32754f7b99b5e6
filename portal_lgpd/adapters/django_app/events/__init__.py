"""
Eventos de domínio no adapter Django: publishers e handlers Celery.
"""
