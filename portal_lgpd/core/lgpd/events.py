"""
Domain Events do Domínio LGPD.

Eventos:
- SolicitacaoLGPDCriadaEvent: nova solicitação registrada (admin ou portal)
- SolicitacaoLGPDProcessadaEvent: solicitação concluída/recusada
- DadosTitularExportadosEvent: pacote de dados gerado
- DadosTitularExcluidosEvent: cascata de exclusão concluída
- ConsentimentoAlteradoEvent: consentimento concedido/revogado

Publicados pelo UnitOfWork após commit; os handlers Celery usam
esses eventos para notificar o titular sem bloquear a transação.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from portal_lgpd.core.shared.events import DomainEvent


@dataclass
class SolicitacaoLGPDCriadaEvent(DomainEvent):
    """
    Evento: Solicitação LGPD foi criada.

    Handlers típicos:
    - Confirmar recebimento ao titular por email
    - Alertar administradores do módulo LGPD
    """

    tipo: str = ""
    tipo_titular: str = ""
    titular_id: str = ""
    titular_email: str = ""
    origem: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "SolicitacaoLGPD"


@dataclass
class SolicitacaoLGPDProcessadaEvent(DomainEvent):
    """
    Evento: Solicitação LGPD foi processada.

    Attributes:
        tipo: Tipo da solicitação
        status: Status final (concluida/recusada/em_andamento)
        responsavel_id: Administrador que processou
        titular_email: Destino da notificação
        justificativa_recusa: Preenchida quando recusada
    """

    tipo: str = ""
    status: str = ""
    responsavel_id: str = ""
    titular_nome: str = ""
    titular_email: str = ""
    justificativa_recusa: Optional[str] = None

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "SolicitacaoLGPD"


@dataclass
class DadosTitularExportadosEvent(DomainEvent):
    tipo_titular: str = ""
    solicitante: str = ""
    nome_arquivo: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Titular"


@dataclass
class DadosTitularExcluidosEvent(DomainEvent):
    """
    Evento: Dados do titular foram excluídos.

    O email é capturado antes da exclusão para permitir a
    confirmação final ao titular.
    """

    tipo_titular: str = ""
    titular_email: str = ""
    solicitacao_id: Optional[str] = None
    registros_excluidos: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Titular"


@dataclass
class ConsentimentoAlteradoEvent(DomainEvent):
    tipo_titular: str = ""
    acao: str = ""
    consentimento_novo: bool = False
    usuario_id: Optional[str] = None

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Titular"
