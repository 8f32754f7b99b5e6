"""
Serviço de Código de Verificação.

Gera, hasheia e compara códigos numéricos de uso único que provam a
posse de um canal de contato (telefone ou email), e os envia com a
política de fallback SMS → email.

Os canais são dependências injetadas (`CanalEnvio`), o que permite
substituir o gateway SMS e o provedor de email nos testes.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable
import logging
import re
import secrets

import bcrypt

from .entities import CODIGO_EXPIRACAO_MINUTOS, CanalVerificacao

logger = logging.getLogger(__name__)


BCRYPT_ROUNDS = 10


def gerar_codigo_verificacao() -> str:
    """Código de 6 dígitos, uniforme entre 100000 e 999999."""
    return str(100000 + secrets.randbelow(900000))


def hashear_codigo(codigo: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash bcrypt (com salt) do código.

    Args:
        codigo: Código em texto puro
        rounds: Fator de custo do bcrypt

    Returns:
        Hash em texto (formato $2b$...)
    """
    return bcrypt.hashpw(codigo.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def comparar_codigo(codigo: str, hashed: str) -> bool:
    """Comparação em tempo constante via bcrypt.checkpw."""
    if not codigo or not hashed:
        return False
    try:
        return bcrypt.checkpw(codigo.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # hash malformado
        return False


def normalizar_telefone(telefone: str) -> str:
    """
    Normaliza telefone para o formato internacional (E.164).

    - 10 ou 11 dígitos: número nacional, recebe +55
    - Mais de 11 dígitos sem '+': já tem código do país, recebe '+'
    - Demais casos: retornado sem alteração

    Example:
        >>> normalizar_telefone("(11) 98765-4321")
        '+5511987654321'
    """
    digitos = re.sub(r"\D", "", telefone)

    if len(digitos) in (10, 11):
        return f"+55{digitos}"

    if len(digitos) > 11 and not telefone.startswith("+"):
        return f"+{digitos}"

    return telefone


# =============================================================================
# Canais de envio
# =============================================================================

@runtime_checkable
class CanalEnvio(Protocol):
    """
    Canal externo de entrega (gateway SMS, provedor de email).

    Implementações devem ter timeout limitado e lançar exceção em
    caso de falha; a política de fallback fica no serviço.
    """

    nome: str

    def enviar(self, destino: str, mensagem: str, assunto: Optional[str] = None) -> None:
        ...


@dataclass
class ResultadoEnvioCodigo:
    """
    Resultado do envio do código.

    O código em texto puro nunca é exposto; apenas o hash, que o
    chamador persiste junto ao VerificationToken.
    """

    sucesso: bool
    canal: Optional[CanalVerificacao] = None
    hashed_codigo: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    erro: Optional[str] = None


class VerificacaoCodigoService:
    """
    Envia o código de verificação com fallback entre canais.

    Política:
    1. Com telefone: tenta SMS
    2. SMS falhou (ou sem telefone) e há email: tenta email
    3. Nenhum canal funcionou: resultado com erro combinado

    Falhas de canal são capturadas e reportadas no resultado,
    nunca lançadas para o chamador.

    Example:
        service = VerificacaoCodigoService(canal_sms, canal_email)
        resultado = service.enviar_codigo_verificacao(
            titular_nome="Maria Silva",
            telefone="11987654321",
        )
        if resultado.sucesso:
            token_repo.save(VerificationToken.emitir(resultado.hashed_codigo, ...))
    """

    def __init__(
        self,
        canal_sms: Optional[CanalEnvio] = None,
        canal_email: Optional[CanalEnvio] = None,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
        validade_minutos: int = CODIGO_EXPIRACAO_MINUTOS,
        nome_portal: str = "Portal LGPD",
    ):
        self.canal_sms = canal_sms
        self.canal_email = canal_email
        self.bcrypt_rounds = bcrypt_rounds
        self.validade_minutos = validade_minutos
        self.nome_portal = nome_portal

    def _mensagem_sms(self, titular_nome: str, codigo: str) -> str:
        primeiro_nome = titular_nome.split(" ")[0]
        return (
            f"{self.nome_portal}\n\n"
            f"Olá, {primeiro_nome}!\n\n"
            f"Seu código de verificação é: {codigo}\n\n"
            f"Este código expira em {self.validade_minutos} minutos.\n\n"
            f"Se você não solicitou este código, ignore esta mensagem."
        )

    def _mensagem_email(self, titular_nome: str, codigo: str) -> str:
        return (
            f"Olá, {titular_nome}.\n\n"
            f"Recebemos uma solicitação de acesso aos seus dados pessoais "
            f"no {self.nome_portal}.\n\n"
            f"Código de verificação: {codigo}\n\n"
            f"O código expira em {self.validade_minutos} minutos. "
            f"Se você não fez esta solicitação, ignore este email."
        )

    def _tentar_sms(self, telefone: str, titular_nome: str, codigo: str) -> Optional[str]:
        """Retorna None em caso de sucesso ou a mensagem de erro."""
        if self.canal_sms is None:
            return "canal SMS não configurado"
        try:
            self.canal_sms.enviar(telefone, self._mensagem_sms(titular_nome, codigo))
            logger.info(f"[SMS] Código de verificação enviado para {telefone[:6]}***")
            return None
        except Exception as e:
            logger.warning(f"[SMS] Falha ao enviar código: {e}")
            return str(e) or e.__class__.__name__

    def _tentar_email(self, email: str, titular_nome: str, codigo: str) -> Optional[str]:
        if self.canal_email is None:
            return "canal de email não configurado"
        try:
            self.canal_email.enviar(
                email,
                self._mensagem_email(titular_nome, codigo),
                assunto=f"{self.nome_portal} - Código de verificação",
            )
            logger.info("[EMAIL] Código de verificação enviado por email")
            return None
        except Exception as e:
            logger.warning(f"[EMAIL] Falha ao enviar código: {e}")
            return str(e) or e.__class__.__name__

    def enviar_codigo_verificacao(
        self,
        titular_nome: str,
        telefone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> ResultadoEnvioCodigo:
        """
        Gera um código, envia pelo melhor canal disponível e retorna o hash.

        Args:
            titular_nome: Nome do titular (personaliza a mensagem)
            telefone: Telefone (qualquer formato, será normalizado)
            email: Email para envio direto ou fallback

        Returns:
            ResultadoEnvioCodigo (sucesso ou erro combinado)
        """
        if not telefone and not email:
            return ResultadoEnvioCodigo(
                sucesso=False,
                erro="Nenhum canal de envio disponível (telefone ou email)",
            )

        codigo = gerar_codigo_verificacao()
        erro_sms = None
        telefone_normalizado = normalizar_telefone(telefone) if telefone else None

        if telefone_normalizado:
            erro_sms = self._tentar_sms(telefone_normalizado, titular_nome, codigo)
            if erro_sms is None:
                return ResultadoEnvioCodigo(
                    sucesso=True,
                    canal=CanalVerificacao.SMS,
                    hashed_codigo=hashear_codigo(codigo, self.bcrypt_rounds),
                    telefone=telefone_normalizado,
                )
            if email:
                logger.info("[VERIFICACAO] SMS falhou, tentando email como fallback")

        if email:
            erro_email = self._tentar_email(email, titular_nome, codigo)
            if erro_email is None:
                return ResultadoEnvioCodigo(
                    sucesso=True,
                    canal=CanalVerificacao.EMAIL,
                    hashed_codigo=hashear_codigo(codigo, self.bcrypt_rounds),
                    email=email,
                )
            if erro_sms is not None:
                return ResultadoEnvioCodigo(
                    sucesso=False,
                    canal=CanalVerificacao.EMAIL,
                    erro=f"SMS: {erro_sms} | Email: {erro_email}",
                )
            return ResultadoEnvioCodigo(
                sucesso=False,
                canal=CanalVerificacao.EMAIL,
                erro=f"Email: {erro_email}",
            )

        return ResultadoEnvioCodigo(
            sucesso=False,
            canal=CanalVerificacao.SMS,
            erro=f"SMS: {erro_sms}",
        )
