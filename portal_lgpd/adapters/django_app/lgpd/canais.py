"""
Canais de envio do código de verificação.

Implementações do port `CanalEnvio` (core/lgpd/verificacao.py):
- TwilioSMSChannel: SMS via SDK oficial da Twilio
- DjangoEmailChannel: email via django.core.mail

Ambos têm timeout limitado e lançam exceção em caso de falha;
o fallback SMS → email fica no VerificacaoCodigoService.
"""

from typing import Optional
import logging

from django.core.mail import get_connection, send_mail
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from portal_lgpd.core.shared.exceptions import ConfiguracaoCanalError

logger = logging.getLogger(__name__)


class TwilioSMSChannel:
    """
    Canal SMS (Twilio).

    Example:
        canal = TwilioSMSChannel(sid, token, "+15550001111", timeout=10)
        canal.enviar("+5511987654321", "Seu código é 123456")
    """

    nome = "sms"

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        timeout: float = 10,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self._client = None

    @property
    def configurado(self) -> bool:
        return all([self.account_sid, self.auth_token, self.from_number])

    def _get_client(self) -> Client:
        if not self.configurado:
            raise ConfiguracaoCanalError("Twilio não configurado (TWILIO_ACCOUNT_SID/AUTH_TOKEN/PHONE_NUMBER)")
        if self._client is None:
            self._client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout),
            )
        return self._client

    def enviar(self, destino: str, mensagem: str, assunto: Optional[str] = None) -> None:
        message = self._get_client().messages.create(
            body=mensagem,
            from_=self.from_number,
            to=destino,
        )
        logger.debug(f"[SMS] Mensagem Twilio criada: {message.sid}")


class DjangoEmailChannel:
    """Canal de email usando o backend configurado em EMAIL_BACKEND."""

    nome = "email"

    def __init__(self, from_email: Optional[str] = None, timeout: float = 10):
        self.from_email = from_email
        self.timeout = timeout

    def enviar(self, destino: str, mensagem: str, assunto: Optional[str] = None) -> None:
        send_mail(
            subject=assunto or "Código de verificação",
            message=mensagem,
            from_email=self.from_email,
            recipient_list=[destino],
            fail_silently=False,
            connection=get_connection(timeout=self.timeout),
        )
