"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- MembroModel / VisitanteModel → Titular (tipo único para o Core)
- SolicitacaoLGPD ↔ SolicitacaoLGPDModel
- VerificationToken ↔ VerificationTokenModel
- Logs (consentimento, auditoria, acesso) ↔ Models

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
"""

from typing import Any, Dict

from portal_lgpd.core.lgpd.entities import (
    AcaoAcessoLGPD,
    AcaoConsentimento,
    CanalVerificacao,
    LogAcessoLGPD,
    LogAuditoria,
    LogConsentimento,
    NotaPastoral,
    OrigemSolicitacao,
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

from .models import (
    LogAcessoLGPDModel,
    LogAuditoriaModel,
    LogConsentimentoModel,
    SolicitacaoLGPDModel,
    VerificationTokenModel,
)


class TitularMapper:
    """
    Converte registros de membro/visitante no tipo único Titular.

    `dados` carrega os campos específicos de cada tabela, usados
    apenas na exportação.
    """

    @staticmethod
    def from_membro(model: MembroModel) -> Titular:
        return Titular(
            tipo=TipoTitular.MEMBRO,
            id=model.id,
            nome=model.nome,
            cpf=model.cpf,
            data_nascimento=model.data_nascimento,
            email=model.email,
            telefone=model.telefone,
            familia_id=model.familia_id,
            consentimento_lgpd=model.consentimento_lgpd,
            dados={
                "endereco": model.endereco,
                "cidade": model.cidade,
                "estado_civil": model.estado_civil,
                "profissao": model.profissao,
                "data_batismo": model.data_batismo,
                "status": model.status,
                "criado_em": model.criado_em,
            },
        )

    @staticmethod
    def from_visitante(model: VisitanteModel) -> Titular:
        return Titular(
            tipo=TipoTitular.VISITANTE,
            id=model.id,
            nome=model.nome,
            cpf=model.cpf,
            data_nascimento=model.data_nascimento,
            email=model.email,
            telefone=model.telefone,
            consentimento_lgpd=model.consentimento_lgpd,
            dados={
                "endereco": model.endereco,
                "como_conheceu": model.como_conheceu,
                "data_visita": model.data_visita,
                "observacoes": model.observacoes,
                "status": model.status,
                "criado_em": model.criado_em,
            },
        )


class DadosTitularMapper:
    """Registros dependentes → dicionários/entidades do Core."""

    @staticmethod
    def familia_to_dict(model: FamiliaModel) -> Dict[str, Any]:
        return {
            "id": model.id,
            "nome": model.nome,
            "endereco": model.endereco,
            "criado_em": model.criado_em,
        }

    @staticmethod
    def nota_to_entity(model: NotaPastoralModel) -> NotaPastoral:
        return NotaPastoral(
            id=model.id,
            titular_id=model.membro_id,
            titulo=model.titulo,
            conteudo=model.conteudo,
            nivel_sigilo=model.nivel_sigilo,
            autor_id=model.autor_id,
            criado_em=model.criado_em,
        )

    @staticmethod
    def transacao_to_dict(model: TransacaoFinanceiraModel) -> Dict[str, Any]:
        return {
            "id": model.id,
            "tipo": model.tipo,
            "categoria": model.categoria,
            "descricao": model.descricao,
            "valor": model.valor,
            "data": model.data,
            "membro_id": model.membro_id,
            "centro_custo": model.centro_custo,
            "metodo_pagamento": model.metodo_pagamento,
            "criado_em": model.criado_em,
        }

    @staticmethod
    def acao_diaconal_to_dict(model: AcaoDiaconalModel) -> Dict[str, Any]:
        return {
            "id": model.id,
            "tipo": model.tipo,
            "descricao": model.descricao,
            "beneficiario": model.beneficiario,
            "valor_gasto": model.valor_gasto,
            "data": model.data,
            "observacoes": model.observacoes,
            "criado_em": model.criado_em,
        }


class SolicitacaoLGPDMapper:

    @staticmethod
    def to_model_data(entity: SolicitacaoLGPD) -> Dict[str, Any]:
        """Campos para update_or_create (sem o id)."""
        return {
            "tipo": entity.tipo.value,
            "status": entity.status.value,
            "tipo_titular": entity.tipo_titular.value,
            "titular_id": entity.titular_id,
            "titular_nome": entity.titular_nome,
            "titular_email": entity.titular_email or "",
            "motivo": entity.motivo,
            "justificativa_recusa": entity.justificativa_recusa,
            "responsavel_id": entity.responsavel_id,
            "data_atendimento": entity.data_atendimento,
            "arquivo_exportacao": entity.arquivo_exportacao,
            "origem": entity.origem.value,
            "criado_em": entity.criado_em,
        }

    @staticmethod
    def to_entity(model: SolicitacaoLGPDModel) -> SolicitacaoLGPD:
        """
        Converte Model para Entity.

        Bypassa o factory `criar` - dados já validados na criação.
        """
        return SolicitacaoLGPD(
            id=model.id,
            tipo=TipoSolicitacao(model.tipo),
            status=StatusSolicitacao(model.status),
            tipo_titular=TipoTitular(model.tipo_titular),
            titular_id=model.titular_id,
            titular_nome=model.titular_nome,
            titular_email=model.titular_email,
            motivo=model.motivo,
            justificativa_recusa=model.justificativa_recusa,
            responsavel_id=model.responsavel_id,
            data_atendimento=model.data_atendimento,
            arquivo_exportacao=model.arquivo_exportacao,
            origem=OrigemSolicitacao(model.origem),
            criado_em=model.criado_em,
        )


class VerificationTokenMapper:

    @staticmethod
    def to_model_data(entity: VerificationToken) -> Dict[str, Any]:
        return {
            "hashed_codigo": entity.hashed_codigo,
            "tipo_titular": entity.tipo_titular.value,
            "titular_id": entity.titular_id,
            "telefone": entity.telefone,
            "email": entity.email,
            "canal": entity.canal.value,
            "tentativas_validacao": entity.tentativas_validacao,
            "validado": entity.validado,
            "session_token": entity.session_token,
            "session_expires_at": entity.session_expires_at,
            "expires_at": entity.expires_at,
            "validado_em": entity.validado_em,
            "revogado": entity.revogado,
            "criado_em": entity.criado_em,
        }

    @staticmethod
    def to_entity(model: VerificationTokenModel) -> VerificationToken:
        return VerificationToken(
            id=model.id,
            hashed_codigo=model.hashed_codigo,
            tipo_titular=TipoTitular(model.tipo_titular),
            titular_id=model.titular_id,
            telefone=model.telefone,
            email=model.email,
            canal=CanalVerificacao(model.canal),
            tentativas_validacao=model.tentativas_validacao,
            validado=model.validado,
            session_token=model.session_token,
            session_expires_at=model.session_expires_at,
            expires_at=model.expires_at,
            validado_em=model.validado_em,
            revogado=model.revogado,
            criado_em=model.criado_em,
        )


class LogMapper:
    """Logs imutáveis: apenas criação e leitura."""

    @staticmethod
    def consentimento_to_model(log: LogConsentimento) -> LogConsentimentoModel:
        return LogConsentimentoModel(
            id=log.id,
            tipo_titular=log.tipo_titular.value,
            titular_id=log.titular_id,
            titular_nome=log.titular_nome,
            acao=log.acao.value,
            consentimento_anterior=log.consentimento_anterior,
            consentimento_novo=log.consentimento_novo,
            usuario_id=log.usuario_id,
            ip_address=log.ip_address,
            criado_em=log.criado_em,
        )

    @staticmethod
    def consentimento_to_entity(model: LogConsentimentoModel) -> LogConsentimento:
        return LogConsentimento(
            id=model.id,
            tipo_titular=TipoTitular(model.tipo_titular),
            titular_id=model.titular_id,
            titular_nome=model.titular_nome,
            acao=AcaoConsentimento(model.acao),
            consentimento_anterior=model.consentimento_anterior,
            consentimento_novo=model.consentimento_novo,
            usuario_id=model.usuario_id,
            ip_address=model.ip_address,
            criado_em=model.criado_em,
        )

    @staticmethod
    def auditoria_to_model(log: LogAuditoria) -> LogAuditoriaModel:
        return LogAuditoriaModel(
            id=log.id,
            modulo=log.modulo,
            acao=log.acao,
            descricao=log.descricao,
            registro_id=log.registro_id,
            usuario_id=log.usuario_id,
            usuario_nome=log.usuario_nome,
            usuario_cargo=log.usuario_cargo,
            ip_address=log.ip_address,
            dados_anteriores=log.dados_anteriores,
            dados_novos=log.dados_novos,
            criado_em=log.criado_em,
        )

    @staticmethod
    def auditoria_to_entity(model: LogAuditoriaModel) -> LogAuditoria:
        return LogAuditoria(
            id=model.id,
            modulo=model.modulo,
            acao=model.acao,
            descricao=model.descricao,
            registro_id=model.registro_id,
            usuario_id=model.usuario_id,
            usuario_nome=model.usuario_nome,
            usuario_cargo=model.usuario_cargo,
            ip_address=model.ip_address,
            dados_anteriores=model.dados_anteriores,
            dados_novos=model.dados_novos,
            criado_em=model.criado_em,
        )

    @staticmethod
    def acesso_to_model(log: LogAcessoLGPD) -> LogAcessoLGPDModel:
        return LogAcessoLGPDModel(
            id=log.id,
            tipo_titular=log.tipo_titular,
            titular_id=log.titular_id,
            titular_nome=log.titular_nome,
            acao=log.acao.value,
            canal_verificacao=log.canal_verificacao,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            sucesso=log.sucesso,
            motivo_falha=log.motivo_falha,
            criado_em=log.criado_em,
        )

    @staticmethod
    def acesso_to_entity(model: LogAcessoLGPDModel) -> LogAcessoLGPD:
        return LogAcessoLGPD(
            id=model.id,
            tipo_titular=model.tipo_titular,
            titular_id=model.titular_id,
            titular_nome=model.titular_nome,
            acao=AcaoAcessoLGPD(model.acao),
            canal_verificacao=model.canal_verificacao,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            sucesso=model.sucesso,
            motivo_falha=model.motivo_falha,
            criado_em=model.criado_em,
        )
