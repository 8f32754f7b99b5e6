"""
Ports (Interfaces) do Domínio LGPD.

Contratos que os Adapters de infraestrutura implementam para que
os use cases consultem titulares, montem exportações, executem a
cascata de exclusão e registrem logs.

Ports:
- TitularRepository: resolve Titular (membro/visitante) por uma única interface
- DadosTitularRepository: registros dependentes (família, notas, transações, ações diaconais)
- SolicitacaoLGPDRepository: persistência das solicitações
- LogConsentimentoRepository / LogAuditoriaRepository / LogAcessoRepository: logs
- VerificationTokenRepository: códigos de verificação e sessões

Também contém implementações em memória usadas nos testes.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .entities import (
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


@runtime_checkable
class TitularRepository(Protocol):
    """
    Resolve titulares sobre as tabelas de membros e visitantes.

    Implementações:
    - DjangoTitularRepository (ORM)
    - InMemoryTitularRepository (testes)
    """

    def get(self, tipo: TipoTitular, titular_id: str) -> Optional[Titular]:
        """Busca pelo par (tipo_titular, titular_id)."""
        ...

    def buscar_por_identidade(
        self, nome: str, cpf: str, data_nascimento: date
    ) -> Optional[Titular]:
        """
        Busca por nome, CPF normalizado e data de nascimento.

        Membros têm precedência sobre visitantes.
        """
        ...

    def buscar_por_documento(self, cpf: str, data_nascimento: date) -> Optional[Titular]:
        """Busca por CPF normalizado e data de nascimento."""
        ...

    def atualizar_consentimento(
        self, tipo: TipoTitular, titular_id: str, consentimento: bool
    ) -> None:
        ...

    def delete(self, tipo: TipoTitular, titular_id: str) -> bool:
        """
        Remove o registro principal do titular.

        Returns:
            True se um registro foi removido
        """
        ...


@runtime_checkable
class DadosTitularRepository(Protocol):
    """Registros dependentes lidos pela exportação e removidos pela exclusão."""

    def get_familia(self, familia_id: str) -> Optional[Dict[str, Any]]:
        ...

    def list_notas_pastorais(self, titular_id: str) -> List[NotaPastoral]:
        ...

    def list_transacoes(self, titular_id: str) -> List[Dict[str, Any]]:
        ...

    def list_acoes_diaconais_por_beneficiario(self, beneficiario: str) -> List[Dict[str, Any]]:
        """Ações cujo beneficiário coincide com o nome (sem diferenciar caixa)."""
        ...

    def delete_notas_pastorais(self, titular_id: str) -> int:
        """Returns: quantidade removida."""
        ...

    def delete_transacoes(self, titular_id: str) -> int:
        ...


@runtime_checkable
class SolicitacaoLGPDRepository(Protocol):

    def save(self, solicitacao: SolicitacaoLGPD) -> None:
        ...

    def get_by_id(self, solicitacao_id: str) -> Optional[SolicitacaoLGPD]:
        ...

    def list(
        self,
        status: Optional[StatusSolicitacao] = None,
        tipo: Optional[TipoSolicitacao] = None,
    ) -> List[SolicitacaoLGPD]:
        """Lista ordenada da mais recente para a mais antiga."""
        ...


@runtime_checkable
class LogConsentimentoRepository(Protocol):

    def add(self, log: LogConsentimento) -> None:
        ...

    def list_by_titular(self, tipo: TipoTitular, titular_id: str) -> List[LogConsentimento]:
        ...

    def list_all(self, limit: Optional[int] = None) -> List[LogConsentimento]:
        ...

    def delete_by_titular(self, tipo: TipoTitular, titular_id: str) -> int:
        """Usado exclusivamente pela cascata de exclusão."""
        ...


@runtime_checkable
class LogAuditoriaRepository(Protocol):

    def add(self, log: LogAuditoria) -> None:
        ...

    def list_all(
        self,
        modulo: Optional[str] = None,
        registro_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogAuditoria]:
        ...


@runtime_checkable
class LogAcessoRepository(Protocol):

    def add(self, log: LogAcessoLGPD) -> None:
        ...

    def list_by_titular(self, titular_id: str) -> List[LogAcessoLGPD]:
        ...


@runtime_checkable
class VerificationTokenRepository(Protocol):

    def save(self, token: VerificationToken) -> None:
        ...

    def get_ultimo_pendente(self, titular_id: str, agora: datetime) -> Optional[VerificationToken]:
        """Token mais recente não validado, não revogado e não expirado."""
        ...

    def get_by_session_token(self, session_token: str) -> Optional[VerificationToken]:
        ...

    def registrar_tentativa_falha(self, token_id: str) -> int:
        """Incrementa atomicamente as tentativas e retorna o total gravado."""
        ...

    def revogar_sessao(self, token_id: str) -> bool:
        """Revoga se ainda não revogado. False se outra ação já consumiu a sessão."""
        ...


# =============================================================================
# Implementações em memória
# =============================================================================

class InMemoryTitularRepository:
    """
    TitularRepository em memória.

    Example:
        repo = InMemoryTitularRepository()
        repo.add(Titular(tipo=TipoTitular.MEMBRO, id="m1", nome="Ana"))
    """

    def __init__(self):
        self._titulares: Dict[tuple, Titular] = {}

    def add(self, titular: Titular) -> None:
        self._titulares[(titular.tipo, titular.id)] = titular

    def get(self, tipo: TipoTitular, titular_id: str) -> Optional[Titular]:
        return self._titulares.get((tipo, titular_id))

    def _ordenados(self) -> List[Titular]:
        return sorted(
            self._titulares.values(),
            key=lambda t: 0 if t.tipo == TipoTitular.MEMBRO else 1,
        )

    def buscar_por_identidade(self, nome, cpf, data_nascimento) -> Optional[Titular]:
        nome_normalizado = nome.strip().lower()
        for titular in self._ordenados():
            if (
                titular.nome.strip().lower() == nome_normalizado
                and titular.cpf == cpf
                and titular.data_nascimento == data_nascimento
            ):
                return titular
        return None

    def buscar_por_documento(self, cpf, data_nascimento) -> Optional[Titular]:
        for titular in self._ordenados():
            if titular.cpf == cpf and titular.data_nascimento == data_nascimento:
                return titular
        return None

    def atualizar_consentimento(self, tipo, titular_id, consentimento) -> None:
        titular = self._titulares.get((tipo, titular_id))
        if titular:
            titular.consentimento_lgpd = consentimento

    def delete(self, tipo, titular_id) -> bool:
        return self._titulares.pop((tipo, titular_id), None) is not None


class InMemoryDadosTitularRepository:
    """Registros dependentes em memória (família, notas, transações, diaconia)."""

    def __init__(self):
        self.familias: Dict[str, Dict[str, Any]] = {}
        self.notas: List[NotaPastoral] = []
        self.transacoes: List[Dict[str, Any]] = []
        self.acoes_diaconais: List[Dict[str, Any]] = []

    def get_familia(self, familia_id):
        return self.familias.get(familia_id)

    def list_notas_pastorais(self, titular_id):
        return [n for n in self.notas if n.titular_id == titular_id]

    def list_transacoes(self, titular_id):
        return [t for t in self.transacoes if t.get("membro_id") == titular_id]

    def list_acoes_diaconais_por_beneficiario(self, beneficiario):
        alvo = beneficiario.strip().lower()
        return [
            a for a in self.acoes_diaconais
            if (a.get("beneficiario") or "").strip().lower() == alvo
        ]

    def delete_notas_pastorais(self, titular_id):
        antes = len(self.notas)
        self.notas = [n for n in self.notas if n.titular_id != titular_id]
        return antes - len(self.notas)

    def delete_transacoes(self, titular_id):
        antes = len(self.transacoes)
        self.transacoes = [t for t in self.transacoes if t.get("membro_id") != titular_id]
        return antes - len(self.transacoes)


class InMemorySolicitacaoLGPDRepository:

    def __init__(self):
        self._solicitacoes: Dict[str, SolicitacaoLGPD] = {}

    def save(self, solicitacao):
        self._solicitacoes[solicitacao.id] = solicitacao

    def get_by_id(self, solicitacao_id):
        return self._solicitacoes.get(solicitacao_id)

    def list(self, status=None, tipo=None):
        resultado = [
            s for s in self._solicitacoes.values()
            if (status is None or s.status == status) and (tipo is None or s.tipo == tipo)
        ]
        return sorted(resultado, key=lambda s: s.criado_em, reverse=True)


class InMemoryLogConsentimentoRepository:

    def __init__(self):
        self.logs: List[LogConsentimento] = []

    def add(self, log):
        self.logs.append(log)

    def list_by_titular(self, tipo, titular_id):
        return [log for log in self.logs if log.tipo_titular == tipo and log.titular_id == titular_id]

    def list_all(self, limit=None):
        ordenados = sorted(self.logs, key=lambda log: log.criado_em, reverse=True)
        return ordenados[:limit] if limit else ordenados

    def delete_by_titular(self, tipo, titular_id):
        antes = len(self.logs)
        self.logs = [
            log for log in self.logs
            if not (log.tipo_titular == tipo and log.titular_id == titular_id)
        ]
        return antes - len(self.logs)


class InMemoryLogAuditoriaRepository:

    def __init__(self):
        self.logs: List[LogAuditoria] = []

    def add(self, log):
        self.logs.append(log)

    def list_all(self, modulo=None, registro_id=None, limit=None):
        filtrados = [
            log for log in self.logs
            if (modulo is None or log.modulo == modulo)
            and (registro_id is None or log.registro_id == registro_id)
        ]
        filtrados.sort(key=lambda log: log.criado_em, reverse=True)
        return filtrados[:limit] if limit else filtrados


class InMemoryLogAcessoRepository:

    def __init__(self):
        self.logs: List[LogAcessoLGPD] = []

    def add(self, log):
        self.logs.append(log)

    def list_by_titular(self, titular_id):
        return [log for log in self.logs if log.titular_id == titular_id]


class InMemoryVerificationTokenRepository:

    def __init__(self):
        self.tokens: Dict[str, VerificationToken] = {}

    def save(self, token):
        self.tokens[token.id] = token

    def get_ultimo_pendente(self, titular_id, agora):
        pendentes = [
            t for t in self.tokens.values()
            if t.titular_id == titular_id and t.codigo_pendente(agora)
        ]
        if not pendentes:
            return None
        return max(pendentes, key=lambda t: t.criado_em)

    def get_by_session_token(self, session_token):
        for token in self.tokens.values():
            if token.session_token and token.session_token == session_token:
                return token
        return None

    def registrar_tentativa_falha(self, token_id):
        return self.tokens[token_id].registrar_tentativa_falha()

    def revogar_sessao(self, token_id):
        token = self.tokens.get(token_id)
        if token is None or token.revogado:
            return False
        token.revogar()
        return True


class InMemoryCanalEnvio:
    """
    Canal de envio falso para testes.

    Example:
        sms = InMemoryCanalEnvio("sms", falhar=True)
        service = VerificacaoCodigoService(canal_sms=sms)
    """

    def __init__(self, nome: str, falhar: bool = False):
        self.nome = nome
        self.falhar = falhar
        self.enviados: List[Dict[str, Any]] = []

    def enviar(self, destino, mensagem, assunto=None):
        if self.falhar:
            raise ConnectionError(f"{self.nome} indisponível")
        self.enviados.append({"destino": destino, "mensagem": mensagem, "assunto": assunto})
