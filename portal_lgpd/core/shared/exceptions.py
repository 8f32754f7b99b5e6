"""
Exceções de Domínio do Portal LGPD.

Exceções tipadas permitem que a camada HTTP traduza cada falha
para o status correto sem conhecer detalhes do domínio.

Hierarquia:
    DomainException (base)
    ├── ValidationError (entrada malformada)
    ├── EntityNotFoundError (titular/solicitação inexistente)
    ├── AuthenticationError (código ou sessão inválidos - mensagem genérica)
    │   └── TentativasExcedidasError (limite de tentativas do código)
    ├── PermissaoNegadaError (cargo sem permissão LGPD)
    ├── ChannelDeliveryError (todos os canais de envio falharam)
    ├── ConfiguracaoCanalError (titular sem telefone nem email)
    └── BusinessRuleViolationError (regra de negócio violada)
        ├── TransicaoInvalidaError (solicitação em estado terminal)
        └── ExclusaoFalhouError (cascata de exclusão falhou)
"""


MENSAGEM_CODIGO_INVALIDO = "Código inválido ou expirado."


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Example:
        try:
            solicitacao.processar(StatusSolicitacao.CONCLUIDA, "admin-1")
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Nenhuma alteração de estado ocorre quando lançada.

    Example:
        if not re.fullmatch(r"\\d{11}", cpf):
            raise ValidationError("CPF deve conter 11 dígitos", field="cpf")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Example:
        titular = titular_repo.get(TipoTitular.MEMBRO, titular_id)
        if not titular:
            raise EntityNotFoundError(
                f"Membro {titular_id} não encontrado",
                entity_type="Titular",
                entity_id=titular_id,
            )
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class AuthenticationError(DomainException):
    """
    Código de verificação ou sessão inválidos.

    A mensagem é deliberadamente genérica para não revelar se o
    titular existe. O motivo real fica apenas em `motivo` (para logs).
    """

    def __init__(self, message: str = MENSAGEM_CODIGO_INVALIDO, motivo: str = None):
        self.motivo = motivo
        super().__init__(message, "AUTHENTICATION_ERROR")


class TentativasExcedidasError(AuthenticationError):
    """Número máximo de tentativas de validação atingido para o código."""

    def __init__(self, message: str = None):
        super().__init__(
            message or "Número máximo de tentativas excedido. Solicite um novo código.",
            motivo="tentativas_excedidas",
        )
        self.code = "TENTATIVAS_EXCEDIDAS"


class PermissaoNegadaError(DomainException):
    """Cargo do usuário não possui o nível de permissão LGPD exigido."""

    def __init__(self, message: str, cargo: str = None):
        self.cargo = cargo
        super().__init__(message, "PERMISSAO_NEGADA")


class ChannelDeliveryError(DomainException):
    """
    Falha de entrega em todos os canais disponíveis (SMS e email).

    Só é lançada depois que o fallback entre canais foi tentado.
    """

    def __init__(self, message: str, canal: str = None):
        self.canal = canal
        super().__init__(message, "CHANNEL_DELIVERY_ERROR")


class ConfiguracaoCanalError(DomainException):
    """Titular não possui nenhum canal de contato (telefone/email)."""

    def __init__(self, message: str = "Nenhum canal de envio disponível (telefone ou email)"):
        super().__init__(message, "CONFIGURACAO_CANAL_ERROR")


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Example:
        if not justificativa_recusa:
            raise BusinessRuleViolationError(
                "Recusa exige justificativa",
                rule="RECUSA_EXIGE_JUSTIFICATIVA",
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class TransicaoInvalidaError(BusinessRuleViolationError):
    """Tentativa de transicionar uma solicitação já finalizada."""

    def __init__(self, message: str, status_atual: str = None):
        self.status_atual = status_atual
        super().__init__(message, rule="SOLICITACAO_ESTADO_TERMINAL")


class ExclusaoFalhouError(BusinessRuleViolationError):
    """
    A cascata de exclusão não foi concluída.

    Carrega o ResultadoExclusaoTitular para que o administrador veja
    exatamente o que foi (ou seria) removido antes da falha.
    """

    def __init__(self, message: str, resultado=None):
        self.resultado = resultado
        super().__init__(message, rule="EXCLUSAO_NAO_CONCLUIDA")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.resultado is not None:
            result["resultado"] = self.resultado.to_dict()
        return result
