"""
Fixtures do domínio LGPD (Core).

Repositórios em memória, InMemoryUnitOfWork, canais falsos e um
relógio controlável. Nenhuma fixture aqui acessa o banco.
"""

from datetime import date, datetime, timedelta, timezone
import re

import pytest

from portal_lgpd.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from portal_lgpd.core.lgpd.entities import NotaPastoral, TipoTitular, Titular
from portal_lgpd.core.lgpd.ports import (
    InMemoryCanalEnvio,
    InMemoryDadosTitularRepository,
    InMemoryLogAcessoRepository,
    InMemoryLogAuditoriaRepository,
    InMemoryLogConsentimentoRepository,
    InMemorySolicitacaoLGPDRepository,
    InMemoryTitularRepository,
    InMemoryVerificationTokenRepository,
)
from portal_lgpd.core.lgpd.verificacao import VerificacaoCodigoService


class RelogioFalso:
    """Relógio injetável; `avancar` simula a passagem do tempo."""

    def __init__(self, inicio: datetime = None):
        self.agora = inicio or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.agora

    def avancar(self, **kwargs) -> None:
        self.agora += timedelta(**kwargs)


class CapturaCodigo:
    """Envolve um canal falso e extrai o código da última mensagem."""

    def __init__(self, canal: InMemoryCanalEnvio):
        self.canal = canal

    @property
    def ultimo_codigo(self) -> str:
        mensagem = self.canal.enviados[-1]["mensagem"]
        return re.search(r"\b(\d{6})\b", mensagem).group(1)


@pytest.fixture
def relogio():
    return RelogioFalso()


@pytest.fixture
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def titular_repo():
    return InMemoryTitularRepository()


@pytest.fixture
def dados_repo():
    return InMemoryDadosTitularRepository()


@pytest.fixture
def solicitacao_repo():
    return InMemorySolicitacaoLGPDRepository()


@pytest.fixture
def consentimento_repo():
    return InMemoryLogConsentimentoRepository()


@pytest.fixture
def auditoria_repo():
    return InMemoryLogAuditoriaRepository()


@pytest.fixture
def acesso_repo():
    return InMemoryLogAcessoRepository()


@pytest.fixture
def token_repo():
    return InMemoryVerificationTokenRepository()


@pytest.fixture
def canal_sms():
    return InMemoryCanalEnvio("sms")


@pytest.fixture
def canal_email():
    return InMemoryCanalEnvio("email")


@pytest.fixture
def captura_sms(canal_sms):
    return CapturaCodigo(canal_sms)


@pytest.fixture
def verificacao_service(canal_sms, canal_email):
    return VerificacaoCodigoService(
        canal_sms=canal_sms,
        canal_email=canal_email,
        bcrypt_rounds=4,
        nome_portal="Portal LGPD Teste",
    )


@pytest.fixture
def membro():
    """Membro com telefone, email e família."""
    return Titular(
        tipo=TipoTitular.MEMBRO,
        id="m-1",
        nome="Maria Silva",
        cpf="12345678901",
        data_nascimento=date(1990, 5, 10),
        email="maria@exemplo.com",
        telefone="11987654321",
        familia_id="f-1",
        consentimento_lgpd=True,
        dados={"endereco": "Rua A, 10", "cidade": "São Paulo", "status": "ativo"},
    )


@pytest.fixture
def visitante():
    return Titular(
        tipo=TipoTitular.VISITANTE,
        id="v-1",
        nome="João Souza",
        cpf="98765432100",
        data_nascimento=date(1985, 1, 20),
        email="joao@exemplo.com",
        dados={"como_conheceu": "Amigo", "status": "novo"},
    )


@pytest.fixture
def membro_com_dados(titular_repo, dados_repo, membro):
    """Membro persistido com família, notas, transações e ações diaconais."""
    titular_repo.add(membro)
    dados_repo.familias["f-1"] = {"id": "f-1", "nome": "Família Silva", "endereco": "Rua A, 10"}
    dados_repo.notas.extend([
        NotaPastoral(
            id="n-1", titular_id="m-1", titulo="Visita",
            conteudo="Conteúdo confidencial", nivel_sigilo="alto", autor_id="pastor-1",
        ),
        NotaPastoral(
            id="n-2", titular_id="m-1", titulo="Aconselhamento",
            conteudo="   ", nivel_sigilo="normal", autor_id="pastor-1",
        ),
        NotaPastoral(
            id="n-3", titular_id="outro", titulo="Outra pessoa",
            conteudo="Não exportar", nivel_sigilo="normal", autor_id="pastor-1",
        ),
    ])
    dados_repo.transacoes.extend([
        {"id": "t-1", "membro_id": "m-1", "tipo": "entrada", "valor": 10000, "data": date(2024, 1, 5)},
        {"id": "t-2", "membro_id": "m-1", "tipo": "entrada", "valor": 5000, "data": date(2024, 2, 5)},
        {"id": "t-3", "membro_id": "outro", "tipo": "entrada", "valor": 700, "data": date(2024, 2, 5)},
    ])
    dados_repo.acoes_diaconais.extend([
        {"id": "a-1", "beneficiario": "  maria silva ", "tipo": "cesta_basica", "data": date(2024, 1, 10)},
        {"id": "a-2", "beneficiario": "Maria Silveira", "tipo": "cesta_basica", "data": date(2024, 1, 10)},
    ])
    return membro
