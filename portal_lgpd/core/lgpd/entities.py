"""
Entidades do Domínio LGPD.

Este módulo define as entidades que encapsulam as regras de
negócio dos direitos do titular de dados (LGPD).

Entidades:
- Titular: pessoa cujos dados são tratados (membro ou visitante)
- SolicitacaoLGPD: agregado principal (acesso/exportação/exclusão)
- VerificationToken: código de verificação + sessão do portal público
- LogConsentimento / LogAuditoria / LogAcessoLGPD: registros imutáveis
- DadosTitularExport: pacote de dados exportado (transiente)
- ResultadoExclusaoTitular: relatório da cascata de exclusão (transiente)

Regras de Negócio Encapsuladas:
- Transições de status unidirecionais; estados terminais nunca são revisitados
- Recusa exige justificativa
- Código expira em 10 minutos e aceita no máximo 3 tentativas
- Sessão expira em 30 minutos e é consumida na primeira ação
- Permissões LGPD por cargo
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union
import secrets
import uuid

from portal_lgpd.core.shared.events import agora_utc
from portal_lgpd.core.shared.exceptions import (
    BusinessRuleViolationError,
    PermissaoNegadaError,
    TransicaoInvalidaError,
    ValidationError,
)


CODIGO_EXPIRACAO_MINUTOS = 10
SESSAO_EXPIRACAO_MINUTOS = 30
MAX_TENTATIVAS_VALIDACAO = 3


class _EnumTexto(Enum):
    """Enum com conversão tolerante a partir de string (nome ou valor)."""

    @classmethod
    def from_string(cls, value: str):
        if isinstance(value, cls):
            return value
        if not value or not isinstance(value, str):
            raise ValueError(f"{cls.__name__} inválido: {value!r}")

        try:
            return cls[value.strip().upper()]
        except KeyError:
            pass

        for item in cls:
            if item.value == value.strip().lower():
                return item

        raise ValueError(f"{cls.__name__} inválido: {value}")


class TipoTitular(_EnumTexto):
    """Discriminador do titular: membro ou visitante."""

    MEMBRO = "membro"
    VISITANTE = "visitante"


class TipoSolicitacao(_EnumTexto):
    ACESSO = "acesso"
    EXPORTACAO = "exportacao"
    EXCLUSAO = "exclusao"


class StatusSolicitacao(_EnumTexto):
    """
    Estados de uma solicitação LGPD.

    Fluxo de Estados:
        PENDENTE → EM_ANDAMENTO → CONCLUIDA | RECUSADA
            └──────────────────→ CONCLUIDA | RECUSADA

    CONCLUIDA e RECUSADA são terminais.
    """

    PENDENTE = "pendente"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDA = "concluida"
    RECUSADA = "recusada"

    @property
    def terminal(self) -> bool:
        return self in (StatusSolicitacao.CONCLUIDA, StatusSolicitacao.RECUSADA)


class OrigemSolicitacao(_EnumTexto):
    ADMIN = "admin"
    PORTAL_PUBLICO = "portal_publico"


class CanalVerificacao(_EnumTexto):
    SMS = "sms"
    EMAIL = "email"
    WEB = "web"


class AcaoConsentimento(_EnumTexto):
    CONCEDIDO = "concedido"
    REVOGADO = "revogado"


class AcaoAcessoLGPD(_EnumTexto):
    SOLICITAR_CODIGO = "solicitar_codigo"
    VALIDAR_CODIGO = "validar_codigo"
    EXPORTAR_DADOS = "exportar_dados"
    SOLICITAR_EXCLUSAO = "solicitar_exclusao"


# =============================================================================
# Permissões por cargo
# =============================================================================

class Cargo(_EnumTexto):
    PASTOR = "PASTOR"
    PRESBITERO = "PRESBITERO"
    TESOUREIRO = "TESOUREIRO"
    DIACONO = "DIACONO"
    SISTEMA = "SISTEMA"

    @classmethod
    def from_string(cls, value: str) -> "Cargo":
        try:
            return cls[value.strip().upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"Cargo inválido: {value}")


class NivelPermissao(_EnumTexto):
    NENHUM = "nenhum"
    LEITURA = "leitura"
    TOTAL = "total"

    def atende(self, exigido: "NivelPermissao") -> bool:
        ordem = [NivelPermissao.NENHUM, NivelPermissao.LEITURA, NivelPermissao.TOTAL]
        return ordem.index(self) >= ordem.index(exigido)


PERMISSOES_LGPD: Dict[Cargo, NivelPermissao] = {
    Cargo.PASTOR: NivelPermissao.TOTAL,
    Cargo.PRESBITERO: NivelPermissao.LEITURA,
    Cargo.TESOUREIRO: NivelPermissao.NENHUM,
    Cargo.DIACONO: NivelPermissao.NENHUM,
    Cargo.SISTEMA: NivelPermissao.TOTAL,
}


def exigir_permissao_lgpd(cargo: str, exigido: NivelPermissao) -> Cargo:
    """
    Garante que o cargo possui o nível de permissão LGPD exigido.

    Args:
        cargo: Nome do cargo (ex: "PASTOR")
        exigido: Nível mínimo necessário

    Returns:
        Cargo validado

    Raises:
        PermissaoNegadaError: Cargo desconhecido ou sem permissão
    """
    try:
        cargo_enum = Cargo.from_string(cargo)
    except ValueError:
        raise PermissaoNegadaError(
            "Usuário sem cargo com acesso ao módulo LGPD", cargo=cargo
        )

    if not PERMISSOES_LGPD[cargo_enum].atende(exigido):
        raise PermissaoNegadaError(
            f"Cargo {cargo_enum.value} não possui permissão '{exigido.value}' no módulo LGPD",
            cargo=cargo_enum.value,
        )
    return cargo_enum


# =============================================================================
# Serialização
# =============================================================================

def serializar_valor(valor: Any) -> Any:
    """Converte valores de domínio para tipos compatíveis com JSON."""
    if isinstance(valor, Enum):
        return valor.value
    if isinstance(valor, (datetime, date)):
        return valor.isoformat()
    if isinstance(valor, dict):
        return {chave: serializar_valor(v) for chave, v in valor.items()}
    if isinstance(valor, (list, tuple)):
        return [serializar_valor(v) for v in valor]
    return valor


# =============================================================================
# Titular
# =============================================================================

@dataclass
class Titular:
    """
    Titular de dados: membro ou visitante.

    Tipo único (tagged union) consumido pelos motores de exportação,
    exclusão e pelo ciclo de vida das solicitações. O discriminador é
    `tipo`; `dados` carrega o registro pessoal completo.

    Attributes:
        tipo: TipoTitular (membro/visitante)
        id: ID do registro subjacente
        nome: Nome completo
        cpf: CPF normalizado (somente dígitos)
        data_nascimento: Data de nascimento
        email: Email de contato
        telefone: Telefone de contato
        familia_id: Família vinculada (somente membros)
        consentimento_lgpd: Estado atual do consentimento
        dados: Registro pessoal completo (para exportação)
    """

    tipo: TipoTitular
    id: str
    nome: str
    cpf: Optional[str] = None
    data_nascimento: Optional[date] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    familia_id: Optional[str] = None
    consentimento_lgpd: bool = False
    dados: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_membro(self) -> bool:
        return self.tipo == TipoTitular.MEMBRO

    @property
    def primeiro_nome(self) -> str:
        return self.nome.split(" ")[0] if self.nome else ""

    def dados_pessoais(self) -> Dict[str, Any]:
        """Registro pessoal serializável, garantindo os campos de identificação."""
        base = {
            "id": self.id,
            "nome": self.nome,
            "cpf": self.cpf,
            "data_nascimento": self.data_nascimento,
            "email": self.email,
            "telefone": self.telefone,
            "consentimento_lgpd": self.consentimento_lgpd,
        }
        if self.is_membro:
            base["familia_id"] = self.familia_id
        base.update(self.dados)
        return serializar_valor(base)


# =============================================================================
# Solicitação LGPD
# =============================================================================

@dataclass
class SolicitacaoLGPD:
    """
    Entidade de Domínio: Solicitação LGPD.

    Uma solicitação de direito do titular (acesso, exportação ou
    exclusão). É criada como PENDENTE e alterada apenas pela ação de
    processamento de um administrador. Nunca é removida fisicamente
    (registro de conformidade).

    Invariantes:
    - Transições seguem TRANSICOES_VALIDAS
    - Estado terminal (CONCLUIDA/RECUSADA) nunca é revisitado
    - RECUSADA exige justificativa_recusa
    - Processamento carimba data_atendimento e responsavel_id

    Example:
        solicitacao = SolicitacaoLGPD.criar(
            tipo=TipoSolicitacao.EXCLUSAO,
            titular=titular,
            motivo="Mudança de igreja",
        )
        solicitacao.processar(StatusSolicitacao.CONCLUIDA, responsavel_id="7")
    """

    tipo: TipoSolicitacao
    tipo_titular: TipoTitular
    titular_id: str
    titular_nome: str
    titular_email: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: StatusSolicitacao = StatusSolicitacao.PENDENTE
    motivo: Optional[str] = None
    justificativa_recusa: Optional[str] = None
    responsavel_id: Optional[str] = None
    data_atendimento: Optional[datetime] = None
    arquivo_exportacao: Optional[str] = None
    origem: OrigemSolicitacao = OrigemSolicitacao.ADMIN
    criado_em: datetime = field(default_factory=agora_utc)

    TRANSICOES_VALIDAS: ClassVar[Dict[StatusSolicitacao, set]] = {
        StatusSolicitacao.PENDENTE: {
            StatusSolicitacao.EM_ANDAMENTO,
            StatusSolicitacao.CONCLUIDA,
            StatusSolicitacao.RECUSADA,
        },
        StatusSolicitacao.EM_ANDAMENTO: {
            StatusSolicitacao.CONCLUIDA,
            StatusSolicitacao.RECUSADA,
        },
        StatusSolicitacao.CONCLUIDA: set(),
        StatusSolicitacao.RECUSADA: set(),
    }

    MOTIVO_MAX_LENGTH: ClassVar[int] = 1000

    @classmethod
    def criar(
        cls,
        tipo: TipoSolicitacao,
        titular: Titular,
        motivo: Optional[str] = None,
        origem: OrigemSolicitacao = OrigemSolicitacao.ADMIN,
    ) -> "SolicitacaoLGPD":
        """
        Factory method para criar solicitação PENDENTE.

        Args:
            tipo: Tipo de direito solicitado
            titular: Titular já resolvido no repositório
            motivo: Motivo informado (opcional)
            origem: Admin ou portal público

        Returns:
            Nova solicitação

        Raises:
            ValidationError: Se motivo exceder o tamanho máximo
        """
        motivo = cls._validar_motivo(motivo)
        return cls(
            tipo=tipo,
            tipo_titular=titular.tipo,
            titular_id=titular.id,
            titular_nome=titular.nome,
            titular_email=titular.email or "",
            motivo=motivo,
            origem=origem,
        )

    @classmethod
    def _validar_motivo(cls, motivo: Optional[str]) -> Optional[str]:
        if motivo is None:
            return None
        motivo = motivo.strip()
        if len(motivo) > cls.MOTIVO_MAX_LENGTH:
            raise ValidationError(
                f"Motivo deve ter no máximo {cls.MOTIVO_MAX_LENGTH} caracteres",
                field="motivo",
            )
        return motivo or None

    @property
    def finalizada(self) -> bool:
        return self.status.terminal

    def pode_transicionar_para(self, novo_status: StatusSolicitacao) -> bool:
        return novo_status in self.TRANSICOES_VALIDAS[self.status]

    def validar_transicao(
        self,
        novo_status: StatusSolicitacao,
        responsavel_id: str,
        justificativa_recusa: Optional[str] = None,
    ) -> None:
        """
        Verifica se a decisão pode ser aplicada, sem alterar a entidade.

        Usado antes de disparar exportação/exclusão, que são
        irreversíveis e não podem rodar para uma decisão inválida.

        Raises:
            TransicaoInvalidaError: Solicitação já finalizada
            BusinessRuleViolationError: Transição não permitida
            ValidationError: Recusa sem justificativa ou sem responsável
        """
        if self.finalizada:
            raise TransicaoInvalidaError(
                f"Solicitação {self.id} já está {self.status.value} e não pode ser reprocessada",
                status_atual=self.status.value,
            )

        if not self.pode_transicionar_para(novo_status):
            raise BusinessRuleViolationError(
                f"Transição inválida: {self.status.value} → {novo_status.value}",
                rule="TRANSICAO_STATUS_INVALIDA",
            )

        justificativa = (justificativa_recusa or "").strip()
        if novo_status == StatusSolicitacao.RECUSADA and not justificativa:
            raise ValidationError(
                "Justificativa é obrigatória para recusar uma solicitação",
                field="justificativa_recusa",
            )

        if not responsavel_id:
            raise ValidationError(
                "Responsável pelo atendimento é obrigatório",
                field="responsavel_id",
            )

    def processar(
        self,
        novo_status: StatusSolicitacao,
        responsavel_id: str,
        justificativa_recusa: Optional[str] = None,
        arquivo_exportacao: Optional[str] = None,
        agora: Optional[datetime] = None,
    ) -> None:
        """
        Aplica a decisão do administrador.

        Args:
            novo_status: Status de destino
            responsavel_id: Administrador que processou
            justificativa_recusa: Obrigatória quando RECUSADA
            arquivo_exportacao: Nome do arquivo gerado (exportação)
            agora: Relógio (injetável para testes)

        Raises:
            Mesmas exceções de `validar_transicao`
        """
        self.validar_transicao(novo_status, responsavel_id, justificativa_recusa)

        self.status = novo_status
        self.responsavel_id = responsavel_id
        self.data_atendimento = agora or agora_utc()
        if novo_status == StatusSolicitacao.RECUSADA:
            self.justificativa_recusa = justificativa_recusa.strip()
        if arquivo_exportacao:
            self.arquivo_exportacao = arquivo_exportacao


# =============================================================================
# Logs imutáveis
# =============================================================================

@dataclass(frozen=True)
class LogConsentimento:
    """
    Registro imutável de mudança de consentimento.

    Append-only: nunca é atualizado. Só é removido pela cascata de
    exclusão do próprio titular.
    """

    tipo_titular: TipoTitular
    titular_id: str
    titular_nome: str
    acao: AcaoConsentimento
    consentimento_anterior: bool
    consentimento_novo: bool
    usuario_id: Optional[str] = None
    ip_address: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    criado_em: datetime = field(default_factory=agora_utc)

    @classmethod
    def registrar(
        cls,
        titular: Titular,
        consentimento_novo: bool,
        usuario_id: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> "LogConsentimento":
        """
        Cria o log a partir do estado atual do titular.

        Raises:
            BusinessRuleViolationError: Se o consentimento não mudou
        """
        if titular.consentimento_lgpd == consentimento_novo:
            raise BusinessRuleViolationError(
                "Consentimento informado é igual ao atual",
                rule="CONSENTIMENTO_INALTERADO",
            )
        return cls(
            tipo_titular=titular.tipo,
            titular_id=titular.id,
            titular_nome=titular.nome,
            acao=AcaoConsentimento.CONCEDIDO if consentimento_novo else AcaoConsentimento.REVOGADO,
            consentimento_anterior=titular.consentimento_lgpd,
            consentimento_novo=consentimento_novo,
            usuario_id=usuario_id,
            ip_address=ip_address,
        )

    def to_dict(self) -> Dict[str, Any]:
        return serializar_valor({
            "id": self.id,
            "tipo_titular": self.tipo_titular,
            "titular_id": self.titular_id,
            "titular_nome": self.titular_nome,
            "acao": self.acao,
            "consentimento_anterior": self.consentimento_anterior,
            "consentimento_novo": self.consentimento_novo,
            "usuario_id": self.usuario_id,
            "ip_address": self.ip_address,
            "criado_em": self.criado_em,
        })


@dataclass(frozen=True)
class LogAuditoria:
    """Registro imutável de ação administrativa sensível."""

    modulo: str
    acao: str
    descricao: str
    usuario_id: str
    usuario_nome: str
    usuario_cargo: str
    registro_id: Optional[str] = None
    ip_address: Optional[str] = None
    dados_anteriores: Optional[Dict[str, Any]] = None
    dados_novos: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    criado_em: datetime = field(default_factory=agora_utc)

    def to_dict(self) -> Dict[str, Any]:
        return serializar_valor({
            "id": self.id,
            "modulo": self.modulo,
            "acao": self.acao,
            "descricao": self.descricao,
            "registro_id": self.registro_id,
            "usuario_id": self.usuario_id,
            "usuario_nome": self.usuario_nome,
            "usuario_cargo": self.usuario_cargo,
            "ip_address": self.ip_address,
            "dados_anteriores": self.dados_anteriores,
            "dados_novos": self.dados_novos,
            "criado_em": self.criado_em,
        })


@dataclass(frozen=True)
class LogAcessoLGPD:
    """Registro de cada ação no portal público (sucesso ou falha)."""

    tipo_titular: str
    titular_id: str
    titular_nome: str
    acao: AcaoAcessoLGPD
    sucesso: bool = True
    canal_verificacao: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    motivo_falha: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    criado_em: datetime = field(default_factory=agora_utc)

    def to_dict(self) -> Dict[str, Any]:
        return serializar_valor({
            "id": self.id,
            "tipo_titular": self.tipo_titular,
            "titular_id": self.titular_id,
            "titular_nome": self.titular_nome,
            "acao": self.acao,
            "canal_verificacao": self.canal_verificacao,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "sucesso": self.sucesso,
            "motivo_falha": self.motivo_falha,
            "criado_em": self.criado_em,
        })


# =============================================================================
# Verificação (código + sessão)
# =============================================================================

@dataclass
class VerificationToken:
    """
    Código de verificação emitido para um titular e a sessão derivada.

    Estados:
        SOLICITANDO → (código emitido) VALIDANDO → AUTENTICADO

    Regras:
    - Código expira em `expires_at` (10 minutos após emissão)
    - No máximo MAX_TENTATIVAS_VALIDACAO tentativas incorretas
    - Após validado, a sessão dura 30 minutos
    - Sessão é revogada (consumida) pela primeira ação que a usa
    """

    hashed_codigo: str
    tipo_titular: TipoTitular
    titular_id: str
    canal: CanalVerificacao
    expires_at: datetime
    telefone: Optional[str] = None
    email: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    tentativas_validacao: int = 0
    validado: bool = False
    session_token: Optional[str] = None
    session_expires_at: Optional[datetime] = None
    validado_em: Optional[datetime] = None
    revogado: bool = False
    criado_em: datetime = field(default_factory=agora_utc)

    @classmethod
    def emitir(
        cls,
        hashed_codigo: str,
        titular: Titular,
        canal: CanalVerificacao,
        telefone: Optional[str] = None,
        email: Optional[str] = None,
        validade_minutos: int = CODIGO_EXPIRACAO_MINUTOS,
        agora: Optional[datetime] = None,
    ) -> "VerificationToken":
        agora = agora or agora_utc()
        return cls(
            hashed_codigo=hashed_codigo,
            tipo_titular=titular.tipo,
            titular_id=titular.id,
            canal=canal,
            telefone=telefone,
            email=email,
            expires_at=agora + timedelta(minutes=validade_minutos),
            criado_em=agora,
        )

    def codigo_pendente(self, agora: datetime) -> bool:
        """Código ainda não validado, não revogado e não expirado."""
        return not self.validado and not self.revogado and agora < self.expires_at

    def tentativas_esgotadas(self, max_tentativas: int = MAX_TENTATIVAS_VALIDACAO) -> bool:
        return self.tentativas_validacao >= max_tentativas

    def registrar_tentativa_falha(self) -> int:
        self.tentativas_validacao += 1
        return self.tentativas_validacao

    def autenticar(
        self,
        agora: Optional[datetime] = None,
        duracao_minutos: int = SESSAO_EXPIRACAO_MINUTOS,
    ) -> str:
        """
        Marca o código como validado e emite o token de sessão opaco.

        Returns:
            session_token gerado

        Raises:
            BusinessRuleViolationError: Se o código não está mais pendente
        """
        agora = agora or agora_utc()
        if not self.codigo_pendente(agora):
            raise BusinessRuleViolationError(
                "Código de verificação não está pendente",
                rule="CODIGO_NAO_PENDENTE",
            )

        self.validado = True
        self.validado_em = agora
        self.session_token = secrets.token_urlsafe(32)
        self.session_expires_at = agora + timedelta(minutes=duracao_minutos)
        return self.session_token

    def sessao_valida(self, agora: datetime) -> bool:
        return (
            self.validado
            and not self.revogado
            and self.session_expires_at is not None
            and agora < self.session_expires_at
        )

    def revogar(self) -> None:
        self.revogado = True


# =============================================================================
# Exportação e exclusão (transientes)
# =============================================================================

@dataclass
class NotaPastoral:
    """Nota pastoral vinculada a um titular (conteúdo sensível)."""

    id: str
    titular_id: str
    titulo: str
    conteudo: str
    nivel_sigilo: str
    autor_id: str
    criado_em: Optional[datetime] = None

    def redigida(self) -> Dict[str, Any]:
        """Metadados sem o corpo do texto."""
        return serializar_valor({
            "id": self.id,
            "titulo": self.titulo,
            "nivel_sigilo": self.nivel_sigilo,
            "autor_id": self.autor_id,
            "criado_em": self.criado_em,
            "tem_conteudo": bool(self.conteudo and self.conteudo.strip()),
        })


@dataclass
class DadosTitularExport:
    """
    Pacote completo de dados pessoais de um titular.

    Montado sob demanda e nunca persistido. `to_dict` gera a forma
    serializável entregue como arquivo JSON.
    """

    tipo_titular: TipoTitular
    dados_pessoais: Dict[str, Any]
    data_exportacao: datetime
    familia: Optional[Dict[str, Any]] = None
    notas_pastorais: List[Dict[str, Any]] = field(default_factory=list)
    transacoes_financeiras: List[Dict[str, Any]] = field(default_factory=list)
    acoes_diaconais: List[Dict[str, Any]] = field(default_factory=list)
    logs_consentimento: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def titular_id(self) -> str:
        return self.dados_pessoais.get("id", "")

    @property
    def titular_nome(self) -> str:
        return self.dados_pessoais.get("nome") or "Desconhecido"

    def nome_arquivo(self) -> str:
        carimbo = self.data_exportacao.strftime("%Y%m%d%H%M%S")
        return f"lgpd_export_{self.tipo_titular.value}_{self.titular_id}_{carimbo}.json"

    def to_dict(self) -> Dict[str, Any]:
        return serializar_valor({
            "tipo_titular": self.tipo_titular,
            "dados_pessoais": self.dados_pessoais,
            "familia": self.familia,
            "notas_pastorais": self.notas_pastorais,
            "transacoes_financeiras": self.transacoes_financeiras,
            "acoes_diaconais": self.acoes_diaconais,
            "logs_consentimento": self.logs_consentimento,
            "data_exportacao": self.data_exportacao,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DadosTitularExport":
        """Reconstrói o pacote a partir do arquivo exportado."""
        return cls(
            tipo_titular=TipoTitular.from_string(data["tipo_titular"]),
            dados_pessoais=dict(data["dados_pessoais"]),
            data_exportacao=datetime.fromisoformat(data["data_exportacao"]),
            familia=data.get("familia"),
            notas_pastorais=list(data.get("notas_pastorais") or []),
            transacoes_financeiras=list(data.get("transacoes_financeiras") or []),
            acoes_diaconais=list(data.get("acoes_diaconais") or []),
            logs_consentimento=list(data.get("logs_consentimento") or []),
        )


@dataclass
class RegistrosExcluidos:
    dados_principais: bool = False
    notas_pastorais: int = 0
    transacoes: int = 0
    logs_consentimento: int = 0

    @property
    def total_dependentes(self) -> int:
        return self.notas_pastorais + self.transacoes + self.logs_consentimento

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dados_principais": self.dados_principais,
            "notas_pastorais": self.notas_pastorais,
            "transacoes": self.transacoes,
            "logs_consentimento": self.logs_consentimento,
        }


@dataclass
class ResultadoExclusaoTitular:
    """
    Relatório da cascata de exclusão.

    Sempre retornado pelo motor de exclusão (nunca lançado).
    Em caso de falha, `sucesso=False`, `erro` descreve a causa e os
    contadores mostram o que foi removido antes da falha. Quando a
    transação foi desfeita, `revertido=True` indica que nada
    permaneceu excluído no banco.
    Com tipo de titular inválido, `tipo_titular` guarda o valor recebido.
    """

    sucesso: bool
    titular_id: str
    tipo_titular: Union[TipoTitular, str, None]
    registros_excluidos: RegistrosExcluidos = field(default_factory=RegistrosExcluidos)
    motivo: Optional[str] = None
    solicitacao_id: Optional[str] = None
    data_exclusao: datetime = field(default_factory=agora_utc)
    erro: Optional[str] = None
    revertido: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return serializar_valor({
            "sucesso": self.sucesso,
            "titular_id": self.titular_id,
            "tipo_titular": self.tipo_titular,
            "registros_excluidos": self.registros_excluidos.to_dict(),
            "motivo": self.motivo,
            "solicitacao_id": self.solicitacao_id,
            "data_exclusao": self.data_exclusao,
            "erro": self.erro,
            "revertido": self.revertido,
        })
