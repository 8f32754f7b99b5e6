"""
Core Domain Layer - O Hexágono.

Lógica de negócio do portal LGPD, sem dependências do Django.
Os use cases recebem repositórios, canais de envio e UnitOfWork
por injeção e podem ser testados inteiramente em memória.
"""
