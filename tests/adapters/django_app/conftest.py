"""
Configuração pytest para testes com Django.

Este arquivo fornece:
- Factories de models (membro, visitante, dependentes)
- Usuários administrativos por cargo
- Client de teste autenticado
"""

from datetime import date
import re

import pytest


CODIGO_RE = re.compile(r"\b(\d{6})\b")


@pytest.fixture
def membro_factory(db):
    """Factory para criar MembroModel."""
    from portal_lgpd.adapters.django_app.pessoas.models import MembroModel

    def create_membro(**kwargs):
        defaults = {
            'nome': 'Maria Silva',
            'cpf': '12345678901',
            'data_nascimento': date(1990, 5, 10),
            'email': 'maria@exemplo.com',
            'telefone': None,
            'endereco': 'Rua A, 10',
            'cidade': 'São Paulo',
            'consentimento_lgpd': True,
        }
        defaults.update(kwargs)
        return MembroModel.objects.create(**defaults)

    return create_membro


@pytest.fixture
def visitante_factory(db):
    """Factory para criar VisitanteModel."""
    from portal_lgpd.adapters.django_app.pessoas.models import VisitanteModel

    def create_visitante(**kwargs):
        defaults = {
            'nome': 'João Souza',
            'cpf': '98765432100',
            'data_nascimento': date(1985, 1, 20),
            'email': 'joao@exemplo.com',
            'como_conheceu': 'Amigo',
        }
        defaults.update(kwargs)
        return VisitanteModel.objects.create(**defaults)

    return create_visitante


@pytest.fixture
def membro_com_dados(membro_factory):
    """Membro com família, notas pastorais, transações e ações diaconais."""
    from portal_lgpd.adapters.django_app.pessoas.models import (
        AcaoDiaconalModel,
        FamiliaModel,
        NotaPastoralModel,
        TransacaoFinanceiraModel,
    )

    familia = FamiliaModel.objects.create(nome='Família Silva', endereco='Rua A, 10')
    membro = membro_factory(familia=familia)

    NotaPastoralModel.objects.create(
        membro_id=membro.id, titulo='Visita', conteudo='Conteúdo confidencial',
        nivel_sigilo='alto', autor_id='pastor-1',
    )
    NotaPastoralModel.objects.create(
        membro_id=membro.id, titulo='Aconselhamento', conteudo='',
        autor_id='pastor-1',
    )
    for valor in (10000, 5000):
        TransacaoFinanceiraModel.objects.create(
            tipo='entrada', categoria='dizimo', descricao='Dízimo', valor=valor,
            data=date(2024, 1, 5), membro_id=membro.id, criado_por_id='tesoureiro-1',
        )
    AcaoDiaconalModel.objects.create(
        tipo='cesta_basica', descricao='Cesta básica', beneficiario='  MARIA SILVA ',
        data=date(2024, 1, 10), responsavel_id='diacono-1',
    )
    AcaoDiaconalModel.objects.create(
        tipo='cesta_basica', descricao='Cesta básica', beneficiario='Maria Silveira',
        data=date(2024, 1, 10), responsavel_id='diacono-1',
    )
    return membro


@pytest.fixture
def usuario_factory(db):
    """Cria usuário staff no grupo do cargo informado."""
    from django.contrib.auth.models import Group, User

    def create_usuario(cargo='PASTOR', username=None, is_staff=True):
        user = User.objects.create_user(
            username=username or f'user-{cargo.lower() or "sem-cargo"}',
            password='senha-segura',
            first_name=cargo.capitalize(),
            is_staff=is_staff,
        )
        if cargo:
            grupo, _ = Group.objects.get_or_create(name=cargo)
            user.groups.add(grupo)
        return user

    return create_usuario


@pytest.fixture
def pastor_client(client, usuario_factory):
    """Client autenticado como PASTOR (permissão total)."""
    client.force_login(usuario_factory('PASTOR'))
    return client


@pytest.fixture
def event_publisher():
    """Publisher em memória do container (EVENT_PUBLISHER_MODE='memory')."""
    from portal_lgpd.config.container import get_container
    return get_container().event_publisher()


@pytest.fixture
def ultimo_codigo():
    """Extrai o código do último email enviado (backend locmem)."""
    from django.core import mail

    def _extrair() -> str:
        return CODIGO_RE.search(mail.outbox[-1].body).group(1)

    return _extrair
