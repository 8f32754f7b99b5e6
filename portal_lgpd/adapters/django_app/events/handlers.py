"""
Event Handlers - Processadores de Eventos de Domínio LGPD.

Handlers são executados de forma assíncrona via Celery quando os
Domain Events são publicados (após commit). Notificações ao titular
ficam fora da transação, então um provedor de email lento nunca
atrasa uma mudança de estado.

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # Processar evento
"""

from datetime import timedelta
from typing import Any, Dict
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import get_connection, send_mail
from django.utils import timezone

logger = logging.getLogger(__name__)


STATUS_DESCRICAO = {
    "em_andamento": "está em atendimento",
    "concluida": "foi concluída",
    "recusada": "foi recusada",
}

TIPO_DESCRICAO = {
    "acesso": "acesso aos dados",
    "exportacao": "exportação dos dados",
    "exclusao": "exclusão dos dados",
}


def _nome_portal() -> str:
    return getattr(settings, "LGPD_NOME_PORTAL", "Portal LGPD")


# =============================================================================
# Event Handlers - LGPD
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_solicitacao_criada(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para SolicitacaoLGPDCriadaEvent.

    Ações:
    - Confirmar ao titular o recebimento da solicitação
    """
    solicitacao_id = event_data.get("aggregate_id")
    tipo = event_data.get("tipo", "")
    email = event_data.get("titular_email")

    logger.info(
        f"[HANDLER] SolicitacaoLGPDCriada: {solicitacao_id} | "
        f"Tipo: {tipo} | Origem: {event_data.get('origem')}"
    )

    if not email:
        logger.info(f"[HANDLER] Titular da solicitação {solicitacao_id} sem email, sem notificação")
        return

    notificar_titular.delay(
        email=email,
        assunto=f"{_nome_portal()} - Solicitação recebida",
        mensagem=(
            f"Recebemos sua solicitação de {TIPO_DESCRICAO.get(tipo, tipo)}.\n\n"
            f"Protocolo: {solicitacao_id}\n\n"
            f"Você será notificado quando ela for processada."
        ),
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_solicitacao_processada(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para SolicitacaoLGPDProcessadaEvent.

    Ações:
    - Notificar o titular sobre o novo status
    - Incluir a justificativa quando recusada
    """
    solicitacao_id = event_data.get("aggregate_id")
    status = event_data.get("status", "")
    tipo = event_data.get("tipo", "")
    email = event_data.get("titular_email")

    logger.info(
        f"[HANDLER] SolicitacaoLGPDProcessada: {solicitacao_id} | "
        f"Status: {status} | Responsável: {event_data.get('responsavel_id')}"
    )

    # exclusão concluída é confirmada por handle_dados_excluidos
    if not email or (tipo == "exclusao" and status == "concluida"):
        return

    mensagem = (
        f"Olá, {event_data.get('titular_nome', '')}.\n\n"
        f"Sua solicitação de {TIPO_DESCRICAO.get(tipo, tipo)} "
        f"{STATUS_DESCRICAO.get(status, status)}.\n\n"
        f"Protocolo: {solicitacao_id}"
    )
    if status == "recusada" and event_data.get("justificativa_recusa"):
        mensagem += f"\n\nJustificativa: {event_data['justificativa_recusa']}"

    notificar_titular.delay(
        email=email,
        assunto=f"{_nome_portal()} - Atualização da sua solicitação",
        mensagem=mensagem,
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_dados_excluidos(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para DadosTitularExcluidosEvent.

    O email foi capturado no evento antes da exclusão; é o último
    contato com o titular.
    """
    titular_id = event_data.get("aggregate_id")
    registros = event_data.get("registros_excluidos") or {}

    logger.info(
        f"[HANDLER] DadosTitularExcluidos: {event_data.get('tipo_titular')}/{titular_id} | "
        f"Registros: {registros}"
    )

    email = event_data.get("titular_email")
    if email:
        notificar_titular.delay(
            email=email,
            assunto=f"{_nome_portal()} - Dados excluídos",
            mensagem=(
                "Conforme solicitado, seus dados pessoais foram excluídos "
                "dos nossos registros.\n\n"
                f"Protocolo: {event_data.get('solicitacao_id') or titular_id}"
            ),
        )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_dados_exportados(self, event_data: Dict[str, Any]) -> None:
    logger.info(
        f"[HANDLER] DadosTitularExportados: {event_data.get('tipo_titular')}/"
        f"{event_data.get('aggregate_id')} | Solicitante: {event_data.get('solicitante')} | "
        f"Arquivo: {event_data.get('nome_arquivo')}"
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_consentimento_alterado(self, event_data: Dict[str, Any]) -> None:
    logger.info(
        f"[HANDLER] ConsentimentoAlterado: {event_data.get('tipo_titular')}/"
        f"{event_data.get('aggregate_id')} | {event_data.get('acao')} "
        f"por {event_data.get('usuario_id')}"
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    "SolicitacaoLGPDCriadaEvent": handle_solicitacao_criada,
    "SolicitacaoLGPDProcessadaEvent": handle_solicitacao_processada,
    "DadosTitularExcluidosEvent": handle_dados_excluidos,
    "DadosTitularExportadosEvent": handle_dados_exportados,
    "ConsentimentoAlteradoEvent": handle_consentimento_alterado,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'SolicitacaoLGPDCriadaEvent')
        event_data: Dados do evento serializado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notificar_titular(self, email: str, assunto: str, mensagem: str) -> None:
    """
    Envia email de notificação ao titular.

    Falhas do provedor são reprocessadas pelo Celery (retry).
    """
    try:
        send_mail(
            subject=assunto,
            message=mensagem,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            connection=get_connection(timeout=getattr(settings, "LGPD_CANAL_TIMEOUT", 10)),
        )
        logger.info(f"[NOTIFICATION] Email enviado: {assunto}")
    except Exception as e:
        logger.warning(f"[NOTIFICATION] Falha ao enviar email: {e}")
        raise self.retry(exc=e)


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def limpar_tokens_expirados(self, days: int = 7) -> int:
    """
    Remove tokens de verificação cujo código e sessão expiraram há
    mais de `days` dias.

    Executada diariamente pelo Celery Beat.

    Returns:
        Número de tokens removidos
    """
    from django.db.models import Q

    from portal_lgpd.adapters.django_app.lgpd.models import VerificationTokenModel

    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = VerificationTokenModel.objects.filter(
        expires_at__lt=cutoff,
    ).filter(
        Q(session_expires_at__isnull=True) | Q(session_expires_at__lt=cutoff)
    ).delete()

    logger.info(f"[SCHEDULED] {deleted} tokens de verificação expirados removidos")
    return deleted
