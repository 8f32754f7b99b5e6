"""
Data Transfer Objects (DTOs) do Domínio LGPD.

Estruturas simples para transportar dados entre a camada HTTP e
os use cases, sem expor as entidades.

Tipos de DTOs:
- Input DTOs: dados de entrada (frozen, imutáveis)
- Output DTOs: formatação das respostas (to_dict)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .entities import (
    DadosTitularExport,
    ResultadoExclusaoTitular,
    SolicitacaoLGPD,
    TipoTitular,
)


MENSAGEM_CODIGO_GENERICA = (
    "Se os dados estiverem corretos, você receberá um código de verificação em breve."
)


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class SolicitarCodigoInputDTO:
    """
    Pedido público de código de verificação.

    Attributes:
        nome: Nome completo do titular
        cpf: CPF (com ou sem pontuação)
        data_nascimento: Data no formato YYYY-MM-DD
        telefone: Telefone alternativo, usado se o cadastro não tiver
        ip_address: IP do cliente (para log de acesso)
        user_agent: User-Agent do cliente
    """

    nome: str
    cpf: str
    data_nascimento: str
    telefone: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ValidarCodigoInputDTO:
    codigo: str
    cpf: str
    data_nascimento: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class SolicitarExclusaoPortalInputDTO:
    """Pedido de exclusão feito pelo titular autenticado por sessão."""

    session_token: str
    motivo: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ExportarDadosPortalInputDTO:
    session_token: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class CriarSolicitacaoInputDTO:
    """
    Solicitação registrada por um administrador.

    Attributes:
        tipo: acesso | exportacao | exclusao
        tipo_titular: membro | visitante
        titular_id: ID do titular
        motivo: Motivo informado pelo titular
        usuario_id / usuario_nome / usuario_cargo: administrador
        ip_address: IP do administrador
    """

    tipo: str
    tipo_titular: str
    titular_id: str
    usuario_id: str
    usuario_nome: str
    usuario_cargo: str
    motivo: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class ProcessarSolicitacaoInputDTO:
    """
    Decisão do administrador sobre uma solicitação.

    Attributes:
        solicitacao_id: ID da solicitação
        status: Status de destino (concluida | recusada | em_andamento)
        responsavel_id: Administrador responsável
        responsavel_nome: Nome (para auditoria)
        responsavel_cargo: Cargo (verificação de permissão)
        justificativa_recusa: Obrigatória quando recusada
        ip_address: IP do administrador
    """

    solicitacao_id: str
    status: str
    responsavel_id: str
    responsavel_nome: str
    responsavel_cargo: str
    justificativa_recusa: Optional[str] = None
    ip_address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "solicitacao_id": self.solicitacao_id,
            "status": self.status,
            "responsavel_id": self.responsavel_id,
            "justificativa_recusa": self.justificativa_recusa,
        }


@dataclass(frozen=True)
class ExportarDadosAdminInputDTO:
    tipo_titular: str
    titular_id: str
    usuario_id: str
    usuario_nome: str
    usuario_cargo: str
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class RegistrarConsentimentoInputDTO:
    tipo_titular: str
    titular_id: str
    consentimento: bool
    usuario_id: str
    usuario_nome: str
    usuario_cargo: str
    ip_address: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class SolicitacaoOutputDTO:
    """Representação de saída de uma SolicitacaoLGPD."""

    id: str
    tipo: str
    status: str
    tipo_titular: str
    titular_id: str
    titular_nome: str
    titular_email: str
    motivo: Optional[str]
    justificativa_recusa: Optional[str]
    responsavel_id: Optional[str]
    data_atendimento: Optional[datetime]
    arquivo_exportacao: Optional[str]
    origem: str
    criado_em: datetime

    @classmethod
    def from_entity(cls, solicitacao: SolicitacaoLGPD) -> "SolicitacaoOutputDTO":
        return cls(
            id=solicitacao.id,
            tipo=solicitacao.tipo.value,
            status=solicitacao.status.value,
            tipo_titular=solicitacao.tipo_titular.value,
            titular_id=solicitacao.titular_id,
            titular_nome=solicitacao.titular_nome,
            titular_email=solicitacao.titular_email,
            motivo=solicitacao.motivo,
            justificativa_recusa=solicitacao.justificativa_recusa,
            responsavel_id=solicitacao.responsavel_id,
            data_atendimento=solicitacao.data_atendimento,
            arquivo_exportacao=solicitacao.arquivo_exportacao,
            origem=solicitacao.origem.value,
            criado_em=solicitacao.criado_em,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tipo": self.tipo,
            "status": self.status,
            "tipo_titular": self.tipo_titular,
            "titular_id": self.titular_id,
            "titular_nome": self.titular_nome,
            "titular_email": self.titular_email,
            "motivo": self.motivo,
            "justificativa_recusa": self.justificativa_recusa,
            "responsavel_id": self.responsavel_id,
            "data_atendimento": self.data_atendimento.isoformat() if self.data_atendimento else None,
            "arquivo_exportacao": self.arquivo_exportacao,
            "origem": self.origem,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class CodigoSolicitadoOutputDTO:
    """
    Resposta pública ao pedido de código.

    A mensagem é sempre a mesma; `canal` só é preenchido quando um
    código foi de fato enviado.
    """

    message: str = MENSAGEM_CODIGO_GENERICA
    canal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"message": self.message}
        if self.canal:
            result["canal"] = self.canal
        return result


@dataclass
class SessaoAutenticadaOutputDTO:
    session_token: str
    expires_at: datetime
    titular_nome: str
    titular_tipo: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Código validado com sucesso!",
            "session_token": self.session_token,
            "expires_at": self.expires_at.isoformat(),
            "titular": {
                "nome": self.titular_nome,
                "tipo": self.titular_tipo,
            },
        }


@dataclass(frozen=True)
class SessaoLGPD:
    """Sessão validada do portal público, vinculada a um titular."""

    titular_id: str
    tipo_titular: TipoTitular
    token_id: str


@dataclass
class ExportacaoOutputDTO:
    """Pacote exportado + nome do arquivo para download."""

    dados: DadosTitularExport
    nome_arquivo: str

    def to_dict(self) -> Dict[str, Any]:
        return self.dados.to_dict()


@dataclass
class ProcessarSolicitacaoOutputDTO:
    """
    Resultado do processamento.

    Attributes:
        solicitacao: Solicitação atualizada
        exportacao: Pacote gerado (aprovação de exportação)
        exclusao: Relatório da cascata (aprovação de exclusão)
    """

    solicitacao: SolicitacaoOutputDTO
    exportacao: Optional[DadosTitularExport] = None
    exclusao: Optional[ResultadoExclusaoTitular] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"solicitacao": self.solicitacao.to_dict()}
        if self.exportacao is not None:
            result["exportacao"] = self.exportacao.to_dict()
        if self.exclusao is not None:
            result["exclusao"] = self.exclusao.to_dict()
        return result
