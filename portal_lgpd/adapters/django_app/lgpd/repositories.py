"""
Repositórios Django do domínio LGPD.

Implementam as interfaces (Ports) definidas em
portal_lgpd/core/lgpd/ports.py. São DRIVEN ADAPTERS - acionados
pelo Core.

Princípios:
- Repository não contém lógica de negócio
- Usa Mappers para conversões
- Escritas participam da transação aberta pelo DjangoUnitOfWork
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
import logging
import re

from django.db.models import F
from django.db.models.functions import Lower, Trim

from portal_lgpd.core.lgpd.entities import (
    LogAcessoLGPD,
    LogAuditoria,
    LogConsentimento,
    NotaPastoral,
    SolicitacaoLGPD,
    StatusSolicitacao,
    TipoSolicitacao,
    TipoTitular,
    Titular,
    VerificationToken,
)
from portal_lgpd.adapters.django_app.pessoas.models import (
    AcaoDiaconalModel,
    FamiliaModel,
    MembroModel,
    NotaPastoralModel,
    TransacaoFinanceiraModel,
    VisitanteModel,
)

from .mappers import (
    DadosTitularMapper,
    LogMapper,
    SolicitacaoLGPDMapper,
    TitularMapper,
    VerificationTokenMapper,
)
from .models import (
    LogAcessoLGPDModel,
    LogAuditoriaModel,
    LogConsentimentoModel,
    SolicitacaoLGPDModel,
    VerificationTokenModel,
)

logger = logging.getLogger(__name__)


def _somente_digitos(cpf: str) -> str:
    return re.sub(r"\D", "", cpf or "")


class DjangoTitularRepository:
    """
    TitularRepository sobre as tabelas `membros` e `visitantes`.

    Toda consulta passa por `_fontes()`, que define a ordem de
    precedência (membros antes de visitantes) e o mapper de cada tabela.

    Example:
        repo = DjangoTitularRepository()
        titular = repo.buscar_por_documento("12345678901", date(1990, 5, 10))
        titular.tipo  # TipoTitular.MEMBRO
    """

    def _fontes(self):
        return (
            (TipoTitular.MEMBRO, MembroModel, TitularMapper.from_membro),
            (TipoTitular.VISITANTE, VisitanteModel, TitularMapper.from_visitante),
        )

    def _model_de(self, tipo: TipoTitular):
        return MembroModel if tipo == TipoTitular.MEMBRO else VisitanteModel

    def get(self, tipo: TipoTitular, titular_id: str) -> Optional[Titular]:
        mapper = dict((t, m) for t, _, m in self._fontes())[tipo]
        model = self._model_de(tipo).objects.filter(id=titular_id).first()
        return mapper(model) if model else None

    def _buscar(self, **filtros) -> Optional[Titular]:
        for _, model_cls, mapper in self._fontes():
            model = model_cls.objects.filter(**filtros).first()
            if model:
                return mapper(model)
        return None

    def buscar_por_identidade(self, nome: str, cpf: str, data_nascimento: date) -> Optional[Titular]:
        return self._buscar(
            nome__iexact=nome.strip(),
            cpf=_somente_digitos(cpf),
            data_nascimento=data_nascimento,
        )

    def buscar_por_documento(self, cpf: str, data_nascimento: date) -> Optional[Titular]:
        return self._buscar(cpf=_somente_digitos(cpf), data_nascimento=data_nascimento)

    def atualizar_consentimento(self, tipo: TipoTitular, titular_id: str, consentimento: bool) -> None:
        self._model_de(tipo).objects.filter(id=titular_id).update(consentimento_lgpd=consentimento)

    def delete(self, tipo: TipoTitular, titular_id: str) -> bool:
        deleted, _ = self._model_de(tipo).objects.filter(id=titular_id).delete()
        if deleted:
            logger.info(f"{tipo.value.capitalize()} removido: {titular_id}")
        return deleted > 0


class DjangoDadosTitularRepository:
    """Registros dependentes (família, notas, transações, ações diaconais)."""

    def __init__(self):
        self._mapper = DadosTitularMapper()

    def get_familia(self, familia_id: str) -> Optional[Dict[str, Any]]:
        model = FamiliaModel.objects.filter(id=familia_id).first()
        return self._mapper.familia_to_dict(model) if model else None

    def list_notas_pastorais(self, titular_id: str) -> List[NotaPastoral]:
        return [
            self._mapper.nota_to_entity(m)
            for m in NotaPastoralModel.objects.filter(membro_id=titular_id)
        ]

    def list_transacoes(self, titular_id: str) -> List[Dict[str, Any]]:
        return [
            self._mapper.transacao_to_dict(m)
            for m in TransacaoFinanceiraModel.objects.filter(membro_id=titular_id)
        ]

    def list_acoes_diaconais_por_beneficiario(self, beneficiario: str) -> List[Dict[str, Any]]:
        alvo = (beneficiario or "").strip().lower()
        if not alvo:
            return []
        queryset = AcaoDiaconalModel.objects.annotate(
            beneficiario_normalizado=Lower(Trim("beneficiario")),
        ).filter(beneficiario_normalizado=alvo)
        return [self._mapper.acao_diaconal_to_dict(m) for m in queryset]

    def delete_notas_pastorais(self, titular_id: str) -> int:
        deleted, _ = NotaPastoralModel.objects.filter(membro_id=titular_id).delete()
        return deleted

    def delete_transacoes(self, titular_id: str) -> int:
        deleted, _ = TransacaoFinanceiraModel.objects.filter(membro_id=titular_id).delete()
        return deleted


class DjangoSolicitacaoLGPDRepository:

    def __init__(self):
        self._mapper = SolicitacaoLGPDMapper()

    def save(self, solicitacao: SolicitacaoLGPD) -> None:
        logger.debug(f"Saving solicitacao: {solicitacao.id}")
        SolicitacaoLGPDModel.objects.update_or_create(
            id=solicitacao.id,
            defaults=self._mapper.to_model_data(solicitacao),
        )

    def get_by_id(self, solicitacao_id: str) -> Optional[SolicitacaoLGPD]:
        try:
            return self._mapper.to_entity(SolicitacaoLGPDModel.objects.get(id=solicitacao_id))
        except SolicitacaoLGPDModel.DoesNotExist:
            logger.debug(f"Solicitacao not found: {solicitacao_id}")
            return None

    def list(
        self,
        status: Optional[StatusSolicitacao] = None,
        tipo: Optional[TipoSolicitacao] = None,
    ) -> List[SolicitacaoLGPD]:
        queryset = SolicitacaoLGPDModel.objects.all()
        if status is not None:
            queryset = queryset.filter(status=status.value)
        if tipo is not None:
            queryset = queryset.filter(tipo=tipo.value)
        return [self._mapper.to_entity(m) for m in queryset.order_by('-criado_em')]


class DjangoLogConsentimentoRepository:

    def add(self, log: LogConsentimento) -> None:
        LogMapper.consentimento_to_model(log).save(force_insert=True)

    def list_by_titular(self, tipo: TipoTitular, titular_id: str) -> List[LogConsentimento]:
        queryset = LogConsentimentoModel.objects.filter(
            tipo_titular=tipo.value, titular_id=titular_id
        ).order_by('-criado_em')
        return [LogMapper.consentimento_to_entity(m) for m in queryset]

    def list_all(self, limit: Optional[int] = None) -> List[LogConsentimento]:
        queryset = LogConsentimentoModel.objects.order_by('-criado_em')
        if limit:
            queryset = queryset[:limit]
        return [LogMapper.consentimento_to_entity(m) for m in queryset]

    def delete_by_titular(self, tipo: TipoTitular, titular_id: str) -> int:
        deleted, _ = LogConsentimentoModel.objects.filter(
            tipo_titular=tipo.value, titular_id=titular_id
        ).delete()
        return deleted


class DjangoLogAuditoriaRepository:

    def add(self, log: LogAuditoria) -> None:
        LogMapper.auditoria_to_model(log).save(force_insert=True)

    def list_all(
        self,
        modulo: Optional[str] = None,
        registro_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogAuditoria]:
        queryset = LogAuditoriaModel.objects.order_by('-criado_em')
        if modulo:
            queryset = queryset.filter(modulo=modulo)
        if registro_id:
            queryset = queryset.filter(registro_id=registro_id)
        if limit:
            queryset = queryset[:limit]
        return [LogMapper.auditoria_to_entity(m) for m in queryset]


class DjangoLogAcessoRepository:

    def add(self, log: LogAcessoLGPD) -> None:
        LogMapper.acesso_to_model(log).save(force_insert=True)

    def list_by_titular(self, titular_id: str) -> List[LogAcessoLGPD]:
        queryset = LogAcessoLGPDModel.objects.filter(titular_id=titular_id).order_by('-criado_em')
        return [LogMapper.acesso_to_entity(m) for m in queryset]


class DjangoVerificationTokenRepository:
    """Códigos de verificação e sessões do portal público."""

    def __init__(self):
        self._mapper = VerificationTokenMapper()

    def save(self, token: VerificationToken) -> None:
        VerificationTokenModel.objects.update_or_create(
            id=token.id,
            defaults=self._mapper.to_model_data(token),
        )

    def get_ultimo_pendente(self, titular_id: str, agora: datetime) -> Optional[VerificationToken]:
        model = (
            VerificationTokenModel.objects
            .filter(
                titular_id=titular_id,
                validado=False,
                revogado=False,
                expires_at__gt=agora,
            )
            .order_by('-criado_em')
            .first()
        )
        return self._mapper.to_entity(model) if model else None

    def get_by_session_token(self, session_token: str) -> Optional[VerificationToken]:
        if not session_token:
            return None
        model = VerificationTokenModel.objects.filter(session_token=session_token).first()
        return self._mapper.to_entity(model) if model else None

    def registrar_tentativa_falha(self, token_id: str) -> int:
        # incremento feito no banco, não sobre o objeto lido
        VerificationTokenModel.objects.filter(id=token_id).update(
            tentativas_validacao=F('tentativas_validacao') + 1,
        )
        return (
            VerificationTokenModel.objects
            .filter(id=token_id)
            .values_list('tentativas_validacao', flat=True)
            .get()
        )

    def revogar_sessao(self, token_id: str) -> bool:
        atualizados = VerificationTokenModel.objects.filter(id=token_id, revogado=False).update(revogado=True)
        return atualizados == 1
