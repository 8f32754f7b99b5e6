"""
Use Cases (Application Services) do Domínio LGPD.

Casos de uso que orquestram entidades, repositórios, canais de
envio e eventos.

Portal público (titular sem login):
- SolicitarCodigoService: emite código de verificação (SMS → email)
- ValidarCodigoService: valida código e emite sessão de 30 minutos
- SessaoLGPDService: valida/consome sessões
- ExportarDadosPortalService: exportação pelo próprio titular
- SolicitarExclusaoPortalService: pedido de exclusão pelo próprio titular

Administração:
- CriarSolicitacaoService / ListarSolicitacoesService / ObterSolicitacaoService
- ProcessarSolicitacaoService: conclui/recusa, disparando exportação/exclusão
- ExportarDadosAdminService
- RegistrarConsentimentoService / ListarLogsConsentimentoService
- ListarLogsAuditoriaService

Motores:
- ExportarDadosTitularService: monta DadosTitularExport
- ExcluirDadosTitularService: cascata de exclusão atômica

Princípios:
- Um Use Case = Uma operação de negócio
- Escritas dentro de `with self.uow:`
- Chamadas externas (SMS/email) fora da transação
"""

from datetime import date, datetime
from typing import Callable, List, Optional
import logging
import re

from portal_lgpd.core.shared.events import agora_utc
from portal_lgpd.core.shared.interfaces import UnitOfWork
from portal_lgpd.core.shared.exceptions import (
    AuthenticationError,
    ChannelDeliveryError,
    ConfiguracaoCanalError,
    DomainException,
    EntityNotFoundError,
    ExclusaoFalhouError,
    TentativasExcedidasError,
    TransicaoInvalidaError,
    ValidationError,
)

from .entities import (
    MAX_TENTATIVAS_VALIDACAO,
    SESSAO_EXPIRACAO_MINUTOS,
    AcaoAcessoLGPD,
    CanalVerificacao,
    DadosTitularExport,
    LogAcessoLGPD,
    LogAuditoria,
    LogConsentimento,
    NivelPermissao,
    OrigemSolicitacao,
    RegistrosExcluidos,
    ResultadoExclusaoTitular,
    SolicitacaoLGPD,
    StatusSolicitacao,
    TipoSolicitacao,
    TipoTitular,
    Titular,
    VerificationToken,
    exigir_permissao_lgpd,
    serializar_valor,
)
from .ports import (
    DadosTitularRepository,
    LogAcessoRepository,
    LogAuditoriaRepository,
    LogConsentimentoRepository,
    SolicitacaoLGPDRepository,
    TitularRepository,
    VerificationTokenRepository,
)
from .verificacao import VerificacaoCodigoService, comparar_codigo
from .dtos import (
    CodigoSolicitadoOutputDTO,
    CriarSolicitacaoInputDTO,
    ExportacaoOutputDTO,
    ExportarDadosAdminInputDTO,
    ExportarDadosPortalInputDTO,
    ProcessarSolicitacaoInputDTO,
    ProcessarSolicitacaoOutputDTO,
    RegistrarConsentimentoInputDTO,
    SessaoAutenticadaOutputDTO,
    SessaoLGPD,
    SolicitacaoOutputDTO,
    SolicitarCodigoInputDTO,
    SolicitarExclusaoPortalInputDTO,
    ValidarCodigoInputDTO,
)
from .events import (
    ConsentimentoAlteradoEvent,
    DadosTitularExcluidosEvent,
    DadosTitularExportadosEvent,
    SolicitacaoLGPDCriadaEvent,
    SolicitacaoLGPDProcessadaEvent,
)

logger = logging.getLogger(__name__)


Relogio = Callable[[], datetime]

MODULO_LGPD = "lgpd"
MODULO_LGPD_PUBLICO = "LGPD_PUBLICO"

USUARIO_PORTAL_ID = "sistema"
USUARIO_PORTAL_NOME = "Portal LGPD Público"
USUARIO_PORTAL_CARGO = "SISTEMA"

NOME_MIN_LENGTH = 3


# =============================================================================
# Helpers de validação
# =============================================================================

def normalizar_cpf(cpf: str) -> str:
    """
    Remove pontuação e valida que restam 11 dígitos.

    Raises:
        ValidationError: Se não restarem exatamente 11 dígitos
    """
    digitos = re.sub(r"\D", "", cpf) if isinstance(cpf, str) else ""
    if len(digitos) != 11:
        raise ValidationError("CPF deve conter 11 dígitos", field="cpf")
    return digitos


def parse_data_nascimento(valor: str) -> date:
    if not isinstance(valor, str) or not re.fullmatch(r"\d{4}-\d{2}-\d{2}", valor):
        raise ValidationError("Data inválida (use YYYY-MM-DD)", field="data_nascimento")
    try:
        return date.fromisoformat(valor)
    except ValueError:
        raise ValidationError("Data inválida (use YYYY-MM-DD)", field="data_nascimento")


def parse_tipo_titular(valor) -> TipoTitular:
    try:
        return TipoTitular.from_string(valor)
    except ValueError:
        raise ValidationError(
            f"Tipo de titular inválido: {valor}. Use 'membro' ou 'visitante'",
            field="tipo_titular",
        )


def _obter_titular(titular_repo: TitularRepository, tipo: TipoTitular, titular_id: str) -> Titular:
    titular = titular_repo.get(tipo, titular_id)
    if titular is None:
        raise EntityNotFoundError(
            f"{tipo.value.capitalize()} {titular_id} não encontrado",
            entity_type="Titular",
            entity_id=titular_id,
        )
    return titular


def _log_acesso(
    acao: AcaoAcessoLGPD,
    titular: Optional[Titular],
    ip_address: Optional[str],
    user_agent: Optional[str],
    sucesso: bool = True,
    canal: Optional[str] = None,
    motivo_falha: Optional[str] = None,
    nome_informado: Optional[str] = None,
) -> LogAcessoLGPD:
    return LogAcessoLGPD(
        tipo_titular=titular.tipo.value if titular else "desconhecido",
        titular_id=titular.id if titular else "unknown",
        titular_nome=titular.nome if titular else (nome_informado or "Desconhecido"),
        acao=acao,
        sucesso=sucesso,
        canal_verificacao=canal,
        ip_address=ip_address,
        user_agent=user_agent,
        motivo_falha=motivo_falha,
    )


def _log_auditoria_portal(acao: str, descricao: str, registro_id: str, ip_address=None) -> LogAuditoria:
    return LogAuditoria(
        modulo=MODULO_LGPD_PUBLICO,
        acao=acao,
        descricao=descricao,
        registro_id=registro_id,
        usuario_id=USUARIO_PORTAL_ID,
        usuario_nome=USUARIO_PORTAL_NOME,
        usuario_cargo=USUARIO_PORTAL_CARGO,
        ip_address=ip_address,
    )


# =============================================================================
# Portal público - verificação
# =============================================================================

class SolicitarCodigoService:
    """
    Use Case: Solicitar código de verificação (portal público).

    Fluxo:
    1. Validar nome, CPF e data de nascimento
    2. Buscar titular (resposta genérica se não existir)
    3. Não reemitir se já houver código pendente
    4. Enviar código (SMS com fallback para email) fora da transação
    5. Persistir VerificationToken com o hash do código

    A resposta nunca revela se o titular existe.

    Example:
        service = SolicitarCodigoService(titular_repo, token_repo, acesso_repo,
                                         verificacao_service, uow)
        output = service.execute(SolicitarCodigoInputDTO(
            nome="Maria Silva", cpf="123.456.789-01", data_nascimento="1990-05-10",
        ))
        output.canal  # "sms" | "email" | None
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        token_repo: VerificationTokenRepository,
        acesso_repo: LogAcessoRepository,
        verificacao_service: VerificacaoCodigoService,
        uow: UnitOfWork,
        max_tentativas: int = MAX_TENTATIVAS_VALIDACAO,
        validade_minutos: int = 10,
        relogio: Relogio = agora_utc,
    ):
        self.titular_repo = titular_repo
        self.token_repo = token_repo
        self.acesso_repo = acesso_repo
        self.verificacao_service = verificacao_service
        self.uow = uow
        self.max_tentativas = max_tentativas
        self.validade_minutos = validade_minutos
        self.relogio = relogio

    def _registrar(self, log: LogAcessoLGPD) -> None:
        with self.uow:
            self.acesso_repo.add(log)

    def execute(self, input_dto: SolicitarCodigoInputDTO) -> CodigoSolicitadoOutputDTO:
        """
        Executa o pedido de código.

        Returns:
            Resposta genérica (canal preenchido apenas se enviado)

        Raises:
            ValidationError: Entrada malformada
            ConfiguracaoCanalError: Titular sem telefone e sem email
            ChannelDeliveryError: Todos os canais falharam
        """
        nome = input_dto.nome.strip() if isinstance(input_dto.nome, str) else ""
        if len(nome) < NOME_MIN_LENGTH:
            raise ValidationError(
                f"Nome deve ter pelo menos {NOME_MIN_LENGTH} caracteres", field="nome"
            )
        cpf = normalizar_cpf(input_dto.cpf)
        data_nascimento = parse_data_nascimento(input_dto.data_nascimento)

        titular = self.titular_repo.buscar_por_identidade(nome, cpf, data_nascimento)
        if titular is None:
            self._registrar(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_CODIGO, None,
                input_dto.ip_address, input_dto.user_agent,
                sucesso=False,
                canal=CanalVerificacao.SMS.value if input_dto.telefone else CanalVerificacao.EMAIL.value,
                motivo_falha="titular_nao_encontrado",
                nome_informado=nome,
            ))
            logger.info("[LGPD] Pedido de código para titular não encontrado")
            return CodigoSolicitadoOutputDTO()

        agora = self.relogio()
        existente = self.token_repo.get_ultimo_pendente(titular.id, agora)
        if existente and not existente.tentativas_esgotadas(self.max_tentativas):
            self._registrar(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                sucesso=False,
                canal=existente.canal.value,
                motivo_falha="codigo_ja_enviado",
            ))
            logger.info(f"[LGPD] Código ainda válido para titular {titular.id}, não reemitido")
            return CodigoSolicitadoOutputDTO()

        telefone = titular.telefone or input_dto.telefone
        email = titular.email
        if not telefone and not email:
            self._registrar(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                sucesso=False,
                motivo_falha="sem_canal_de_contato",
            ))
            logger.error(f"[LGPD] Titular {titular.tipo.value}/{titular.id} sem telefone e sem email")
            raise ConfiguracaoCanalError()

        resultado = self.verificacao_service.enviar_codigo_verificacao(
            titular_nome=titular.nome,
            telefone=telefone,
            email=email,
        )
        canal = resultado.canal.value if resultado.canal else None

        if not resultado.sucesso:
            self._registrar(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                sucesso=False,
                canal=canal,
                motivo_falha=f"erro_envio: {resultado.erro}",
            ))
            raise ChannelDeliveryError(
                "Erro ao enviar código. Por favor, tente novamente mais tarde.",
                canal=canal,
            )

        with self.uow:
            if existente:
                # código anterior com tentativas esgotadas
                existente.revogar()
                self.token_repo.save(existente)

            token = VerificationToken.emitir(
                hashed_codigo=resultado.hashed_codigo,
                titular=titular,
                canal=resultado.canal,
                telefone=resultado.telefone,
                email=resultado.email,
                validade_minutos=self.validade_minutos,
                agora=agora,
            )
            self.token_repo.save(token)
            self.acesso_repo.add(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                canal=canal,
            ))

        logger.info(f"[LGPD] Código emitido para titular {titular.id} via {canal}")
        return CodigoSolicitadoOutputDTO(canal=canal)


class ValidarCodigoService:
    """
    Use Case: Validar código e emitir sessão.

    Fluxo:
    1. Buscar titular por CPF + data de nascimento
    2. Buscar código pendente (não expirado)
    3. Rejeitar se tentativas esgotadas
    4. Comparar hash; tentativa incorreta é persistida
    5. Marcar validado e emitir session_token (30 minutos)

    Todas as falhas de autenticação usam a mesma mensagem genérica.
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        token_repo: VerificationTokenRepository,
        acesso_repo: LogAcessoRepository,
        uow: UnitOfWork,
        max_tentativas: int = MAX_TENTATIVAS_VALIDACAO,
        duracao_sessao_minutos: int = SESSAO_EXPIRACAO_MINUTOS,
        relogio: Relogio = agora_utc,
    ):
        self.titular_repo = titular_repo
        self.token_repo = token_repo
        self.acesso_repo = acesso_repo
        self.uow = uow
        self.max_tentativas = max_tentativas
        self.duracao_sessao_minutos = duracao_sessao_minutos
        self.relogio = relogio

    def _falhar(self, titular: Titular, input_dto, canal: Optional[str], motivo: str) -> None:
        with self.uow:
            self.acesso_repo.add(_log_acesso(
                AcaoAcessoLGPD.VALIDAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                sucesso=False, canal=canal, motivo_falha=motivo,
            ))
        logger.info(f"[LGPD] Validação de código falhou para titular {titular.id}: {motivo}")

    def execute(self, input_dto: ValidarCodigoInputDTO) -> SessaoAutenticadaOutputDTO:
        """
        Raises:
            ValidationError: Entrada malformada
            AuthenticationError: Titular/código inexistente, expirado ou incorreto
            TentativasExcedidasError: Limite de tentativas atingido
        """
        codigo = input_dto.codigo.strip() if isinstance(input_dto.codigo, str) else ""
        if not re.fullmatch(r"\d{6}", codigo):
            raise ValidationError("Código deve conter 6 dígitos", field="codigo")
        cpf = normalizar_cpf(input_dto.cpf)
        data_nascimento = parse_data_nascimento(input_dto.data_nascimento)

        titular = self.titular_repo.buscar_por_documento(cpf, data_nascimento)
        if titular is None:
            raise AuthenticationError(motivo="titular_nao_encontrado")

        agora = self.relogio()
        token = self.token_repo.get_ultimo_pendente(titular.id, agora)
        if token is None:
            self._falhar(titular, input_dto, None, "codigo_nao_encontrado_ou_expirado")
            raise AuthenticationError(motivo="codigo_nao_encontrado_ou_expirado")

        if token.tentativas_esgotadas(self.max_tentativas):
            self._falhar(titular, input_dto, token.canal.value, "tentativas_excedidas")
            raise TentativasExcedidasError()

        if not comparar_codigo(codigo, token.hashed_codigo):
            with self.uow:
                token.tentativas_validacao = self.token_repo.registrar_tentativa_falha(token.id)
                self.acesso_repo.add(_log_acesso(
                    AcaoAcessoLGPD.VALIDAR_CODIGO, titular,
                    input_dto.ip_address, input_dto.user_agent,
                    sucesso=False, canal=token.canal.value, motivo_falha="codigo_incorreto",
                ))
            logger.info(
                f"[LGPD] Código incorreto para titular {titular.id} "
                f"(tentativa {token.tentativas_validacao}/{self.max_tentativas})"
            )
            raise AuthenticationError(motivo="codigo_incorreto")

        with self.uow:
            session_token = token.autenticar(agora, self.duracao_sessao_minutos)
            self.token_repo.save(token)
            self.acesso_repo.add(_log_acesso(
                AcaoAcessoLGPD.VALIDAR_CODIGO, titular,
                input_dto.ip_address, input_dto.user_agent,
                canal=token.canal.value,
            ))

        logger.info(f"[LGPD] Sessão emitida para titular {titular.id}")
        return SessaoAutenticadaOutputDTO(
            session_token=session_token,
            expires_at=token.session_expires_at,
            titular_nome=titular.nome,
            titular_tipo=titular.tipo.value,
        )


class SessaoLGPDService:
    """
    Valida e consome sessões do portal público.

    Uma sessão serve para uma única ação (exportação ou pedido de
    exclusão): `consumir` a revoga e deve ser chamado dentro da
    transação da ação.
    """

    def __init__(self, token_repo: VerificationTokenRepository, relogio: Relogio = agora_utc):
        self.token_repo = token_repo
        self.relogio = relogio

    def _token_valido(self, session_token: Optional[str]) -> VerificationToken:
        if not session_token:
            raise AuthenticationError(
                "Sessão não encontrada. Por favor, valide seu código primeiro.",
                motivo="sessao_ausente",
            )
        token = self.token_repo.get_by_session_token(session_token)
        if token is None or not token.sessao_valida(self.relogio()):
            raise AuthenticationError(
                "Sessão inválida ou expirada. Por favor, solicite um novo código.",
                motivo="sessao_invalida",
            )
        return token

    def validar_sessao(self, session_token: Optional[str]) -> SessaoLGPD:
        """
        Raises:
            AuthenticationError: Sessão ausente, desconhecida, revogada ou expirada
        """
        token = self._token_valido(session_token)
        return SessaoLGPD(
            titular_id=token.titular_id,
            tipo_titular=token.tipo_titular,
            token_id=token.id,
        )

    def consumir(self, session_token: str) -> None:
        """
        Raises:
            AuthenticationError: Sessão inválida ou já consumida por outra ação
        """
        token = self._token_valido(session_token)
        if not self.token_repo.revogar_sessao(token.id):
            raise AuthenticationError(
                "Sessão inválida ou expirada. Por favor, solicite um novo código.",
                motivo="sessao_invalida",
            )
        token.revogar()


# =============================================================================
# Motor de exportação
# =============================================================================

class ExportarDadosTitularService:
    """
    Motor de Exportação: monta o pacote completo de dados de um titular.

    Conteúdo:
    - Registro pessoal (membro ou visitante)
    - Família (membros com família vinculada)
    - Notas pastorais REDIGIDAS (somente metadados + tem_conteudo)
    - Transações financeiras vinculadas
    - Ações diaconais cujo beneficiário é o titular
    - Logs de consentimento

    Sem resultados parciais: qualquer falha de consulta propaga.
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        dados_repo: DadosTitularRepository,
        consentimento_repo: LogConsentimentoRepository,
        relogio: Relogio = agora_utc,
    ):
        self.titular_repo = titular_repo
        self.dados_repo = dados_repo
        self.consentimento_repo = consentimento_repo
        self.relogio = relogio

    def execute(self, tipo_titular, titular_id: str) -> DadosTitularExport:
        """
        Args:
            tipo_titular: TipoTitular ou string ("membro"/"visitante")
            titular_id: ID do titular

        Raises:
            ValidationError: Tipo de titular inválido
            EntityNotFoundError: Titular não existe
        """
        tipo = parse_tipo_titular(tipo_titular)
        titular = _obter_titular(self.titular_repo, tipo, titular_id)

        familia = None
        if titular.is_membro and titular.familia_id:
            familia = self.dados_repo.get_familia(titular.familia_id)

        notas = [nota.redigida() for nota in self.dados_repo.list_notas_pastorais(titular.id)]
        transacoes = self.dados_repo.list_transacoes(titular.id)
        acoes = self.dados_repo.list_acoes_diaconais_por_beneficiario(titular.nome)
        logs = self.consentimento_repo.list_by_titular(tipo, titular.id)

        dados = DadosTitularExport(
            tipo_titular=tipo,
            dados_pessoais=titular.dados_pessoais(),
            data_exportacao=self.relogio(),
            familia=serializar_valor(familia),
            notas_pastorais=notas,
            transacoes_financeiras=serializar_valor(transacoes),
            acoes_diaconais=serializar_valor(acoes),
            logs_consentimento=[log.to_dict() for log in logs],
        )

        logger.info(
            f"[LGPD] Exportação montada para {tipo.value}/{titular.id}: "
            f"{len(notas)} notas, {len(transacoes)} transações, {len(acoes)} ações diaconais"
        )
        return dados


class ExportarDadosPortalService:
    """
    Use Case: Titular exporta os próprios dados pelo portal público.

    Consome a sessão, registra log de acesso e auditoria.
    """

    def __init__(
        self,
        exportacao_service: ExportarDadosTitularService,
        sessao_service: SessaoLGPDService,
        acesso_repo: LogAcessoRepository,
        auditoria_repo: LogAuditoriaRepository,
        uow: UnitOfWork,
    ):
        self.exportacao_service = exportacao_service
        self.sessao_service = sessao_service
        self.acesso_repo = acesso_repo
        self.auditoria_repo = auditoria_repo
        self.uow = uow

    def execute(self, input_dto: ExportarDadosPortalInputDTO) -> ExportacaoOutputDTO:
        sessao = self.sessao_service.validar_sessao(input_dto.session_token)

        try:
            dados = self.exportacao_service.execute(sessao.tipo_titular, sessao.titular_id)
        except Exception as e:
            with self.uow:
                self.acesso_repo.add(LogAcessoLGPD(
                    tipo_titular=sessao.tipo_titular.value,
                    titular_id=sessao.titular_id,
                    titular_nome="Erro",
                    acao=AcaoAcessoLGPD.EXPORTAR_DADOS,
                    sucesso=False,
                    canal_verificacao=CanalVerificacao.WEB.value,
                    ip_address=input_dto.ip_address,
                    user_agent=input_dto.user_agent,
                    motivo_falha=f"erro_interno: {e}",
                ))
            raise

        nome_arquivo = dados.nome_arquivo()
        with self.uow:
            self.sessao_service.consumir(input_dto.session_token)
            self.acesso_repo.add(LogAcessoLGPD(
                tipo_titular=sessao.tipo_titular.value,
                titular_id=sessao.titular_id,
                titular_nome=dados.titular_nome,
                acao=AcaoAcessoLGPD.EXPORTAR_DADOS,
                canal_verificacao=CanalVerificacao.WEB.value,
                ip_address=input_dto.ip_address,
                user_agent=input_dto.user_agent,
            ))
            self.auditoria_repo.add(_log_auditoria_portal(
                acao="EXPORTAR_DADOS",
                descricao=(
                    f"Titular {dados.titular_nome} ({sessao.tipo_titular.value}) "
                    f"exportou seus dados via portal público"
                ),
                registro_id=sessao.titular_id,
                ip_address=input_dto.ip_address,
            ))
            self.uow.publish_event(DadosTitularExportadosEvent(
                aggregate_id=sessao.titular_id,
                tipo_titular=sessao.tipo_titular.value,
                solicitante="titular",
                nome_arquivo=nome_arquivo,
            ))

        return ExportacaoOutputDTO(dados=dados, nome_arquivo=nome_arquivo)


class ExportarDadosAdminService:
    """Use Case: Administrador exporta os dados de um titular."""

    def __init__(
        self,
        exportacao_service: ExportarDadosTitularService,
        auditoria_repo: LogAuditoriaRepository,
        uow: UnitOfWork,
    ):
        self.exportacao_service = exportacao_service
        self.auditoria_repo = auditoria_repo
        self.uow = uow

    def execute(self, input_dto: ExportarDadosAdminInputDTO) -> ExportacaoOutputDTO:
        """
        Raises:
            PermissaoNegadaError: Cargo sem permissão de leitura LGPD
            EntityNotFoundError: Titular não existe
        """
        exigir_permissao_lgpd(input_dto.usuario_cargo, NivelPermissao.LEITURA)
        dados = self.exportacao_service.execute(input_dto.tipo_titular, input_dto.titular_id)
        nome_arquivo = dados.nome_arquivo()

        with self.uow:
            self.auditoria_repo.add(LogAuditoria(
                modulo=MODULO_LGPD,
                acao="exportar",
                descricao=f"Exportação dos dados de {dados.titular_nome} ({dados.tipo_titular.value})",
                registro_id=input_dto.titular_id,
                usuario_id=input_dto.usuario_id,
                usuario_nome=input_dto.usuario_nome,
                usuario_cargo=input_dto.usuario_cargo,
                ip_address=input_dto.ip_address,
            ))
            self.uow.publish_event(DadosTitularExportadosEvent(
                aggregate_id=input_dto.titular_id,
                tipo_titular=dados.tipo_titular.value,
                solicitante=input_dto.usuario_id,
                nome_arquivo=nome_arquivo,
            ))

        return ExportacaoOutputDTO(dados=dados, nome_arquivo=nome_arquivo)


# =============================================================================
# Motor de exclusão
# =============================================================================

class ExcluirDadosTitularService:
    """
    Motor de Exclusão: remove os dados pessoais de um titular em cascata.

    Ordem (cascade=True):
    1. Notas pastorais
    2. Transações financeiras
    3. Logs de consentimento
    4. Registro principal (membro/visitante) - sempre por último

    Toda a cascata roda em uma única transação (`self.uow`), portanto
    é tudo-ou-nada quando o UnitOfWork é atômico. Chamado dentro da
    transação de outro use case, vira um savepoint dela.

    Nunca lança exceção para o chamador: o retorno é sempre um
    ResultadoExclusaoTitular. Em caso de falha, `sucesso=False`,
    os contadores registram o que foi removido antes da falha e
    `revertido` indica se a transação desfez essas remoções.

    Ações diaconais não são removidas (registro de prestação de contas).
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        dados_repo: DadosTitularRepository,
        consentimento_repo: LogConsentimentoRepository,
        uow: UnitOfWork,
        relogio: Relogio = agora_utc,
    ):
        self.titular_repo = titular_repo
        self.dados_repo = dados_repo
        self.consentimento_repo = consentimento_repo
        self.uow = uow
        self.relogio = relogio

    def execute(
        self,
        tipo_titular,
        titular_id: str,
        cascade: bool = True,
        motivo: Optional[str] = None,
        solicitacao_id: Optional[str] = None,
        transacao_externa: Optional[UnitOfWork] = None,
    ) -> ResultadoExclusaoTitular:
        """
        Args:
            tipo_titular: TipoTitular ou string
            titular_id: ID do titular
            cascade: Remove dependentes antes do registro principal
            motivo: Motivo da exclusão (registrado no resultado)
            solicitacao_id: Solicitação LGPD que originou a exclusão
            transacao_externa: UoW já aberto pelo chamador. A cascata roda
                aninhada nele (savepoint) e o evento de exclusão só é
                publicado quando ele fizer commit.

        Returns:
            ResultadoExclusaoTitular (tipo inválido também vira sucesso=False)
        """
        registros = RegistrosExcluidos()
        resultado = ResultadoExclusaoTitular(
            sucesso=False,
            titular_id=titular_id,
            tipo_titular=tipo_titular,
            registros_excluidos=registros,
            motivo=motivo,
            solicitacao_id=solicitacao_id,
            data_exclusao=self.relogio(),
        )

        try:
            resultado.tipo_titular = tipo = parse_tipo_titular(tipo_titular)
        except ValidationError as e:
            resultado.erro = e.message
            logger.error(f"[LGPD] Exclusão de {titular_id} rejeitada: {e.message}")
            return resultado

        eventos = transacao_externa or self.uow
        try:
            with self.uow:
                titular = _obter_titular(self.titular_repo, tipo, titular_id)

                if cascade:
                    registros.notas_pastorais = self.dados_repo.delete_notas_pastorais(titular_id)
                    registros.transacoes = self.dados_repo.delete_transacoes(titular_id)
                    registros.logs_consentimento = self.consentimento_repo.delete_by_titular(
                        tipo, titular_id
                    )

                registros.dados_principais = self.titular_repo.delete(tipo, titular_id)
                if not registros.dados_principais:
                    raise EntityNotFoundError(
                        f"Registro principal de {tipo.value} {titular_id} não foi removido",
                        entity_type="Titular",
                        entity_id=titular_id,
                    )

                eventos.publish_event(DadosTitularExcluidosEvent(
                    aggregate_id=titular_id,
                    tipo_titular=tipo.value,
                    titular_email=titular.email or "",
                    solicitacao_id=solicitacao_id,
                    registros_excluidos=registros.to_dict(),
                ))
        except Exception as e:
            resultado.erro = e.message if isinstance(e, DomainException) else str(e)
            resultado.revertido = self.uow.atomic
            logger.error(
                f"[LGPD] Exclusão de {tipo.value}/{titular_id} falhou "
                f"(revertido={resultado.revertido}): {resultado.erro} "
                f"- parcial: {registros.to_dict()}"
            )
            return resultado

        resultado.sucesso = True
        logger.info(f"[LGPD] Dados de {tipo.value}/{titular_id} excluídos: {registros.to_dict()}")
        return resultado


# =============================================================================
# Ciclo de vida das solicitações
# =============================================================================

class CriarSolicitacaoService:
    """
    Use Case: Administrador registra uma solicitação em nome do titular.

    Fluxo:
    1. Verificar permissão (total)
    2. Resolver titular
    3. Criar solicitação PENDENTE
    4. Auditoria + evento SolicitacaoLGPDCriada
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        solicitacao_repo: SolicitacaoLGPDRepository,
        auditoria_repo: LogAuditoriaRepository,
        uow: UnitOfWork,
    ):
        self.titular_repo = titular_repo
        self.solicitacao_repo = solicitacao_repo
        self.auditoria_repo = auditoria_repo
        self.uow = uow

    def execute(self, input_dto: CriarSolicitacaoInputDTO) -> SolicitacaoOutputDTO:
        exigir_permissao_lgpd(input_dto.usuario_cargo, NivelPermissao.TOTAL)

        try:
            tipo = TipoSolicitacao.from_string(input_dto.tipo)
        except ValueError:
            raise ValidationError(f"Tipo de solicitação inválido: {input_dto.tipo}", field="tipo")

        titular = _obter_titular(
            self.titular_repo, parse_tipo_titular(input_dto.tipo_titular), input_dto.titular_id
        )

        with self.uow:
            solicitacao = SolicitacaoLGPD.criar(
                tipo=tipo,
                titular=titular,
                motivo=input_dto.motivo,
                origem=OrigemSolicitacao.ADMIN,
            )
            self.solicitacao_repo.save(solicitacao)
            self.auditoria_repo.add(LogAuditoria(
                modulo=MODULO_LGPD,
                acao="criar",
                descricao=f"Solicitação de {tipo.value} registrada para {titular.nome}",
                registro_id=solicitacao.id,
                usuario_id=input_dto.usuario_id,
                usuario_nome=input_dto.usuario_nome,
                usuario_cargo=input_dto.usuario_cargo,
                ip_address=input_dto.ip_address,
            ))
            self.uow.publish_event(SolicitacaoLGPDCriadaEvent(
                aggregate_id=solicitacao.id,
                tipo=tipo.value,
                tipo_titular=titular.tipo.value,
                titular_id=titular.id,
                titular_email=solicitacao.titular_email,
                origem=solicitacao.origem.value,
            ))

        return SolicitacaoOutputDTO.from_entity(solicitacao)


class SolicitarExclusaoPortalService:
    """
    Use Case: Titular pede a exclusão dos próprios dados pelo portal.

    Cria uma solicitação PENDENTE (origem portal_publico) que depois
    precisa ser aprovada por um administrador; nenhum dado é excluído
    aqui. A sessão é consumida na mesma transação.
    Falhas depois da validação da sessão entram no log de acesso
    como `erro_interno`.
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        solicitacao_repo: SolicitacaoLGPDRepository,
        sessao_service: SessaoLGPDService,
        acesso_repo: LogAcessoRepository,
        auditoria_repo: LogAuditoriaRepository,
        uow: UnitOfWork,
    ):
        self.titular_repo = titular_repo
        self.solicitacao_repo = solicitacao_repo
        self.sessao_service = sessao_service
        self.acesso_repo = acesso_repo
        self.auditoria_repo = auditoria_repo
        self.uow = uow

    def execute(self, input_dto: SolicitarExclusaoPortalInputDTO) -> SolicitacaoOutputDTO:
        """
        Raises:
            AuthenticationError: Sessão inválida
            EntityNotFoundError: Titular não existe mais
            ValidationError: Motivo muito longo
        """
        sessao = self.sessao_service.validar_sessao(input_dto.session_token)
        try:
            return self._solicitar(sessao, input_dto)
        except Exception as e:
            with self.uow:
                self.acesso_repo.add(LogAcessoLGPD(
                    tipo_titular=sessao.tipo_titular.value,
                    titular_id=sessao.titular_id,
                    titular_nome="Erro",
                    acao=AcaoAcessoLGPD.SOLICITAR_EXCLUSAO,
                    sucesso=False,
                    canal_verificacao=CanalVerificacao.WEB.value,
                    ip_address=input_dto.ip_address,
                    user_agent=input_dto.user_agent,
                    motivo_falha=f"erro_interno: {e}",
                ))
            raise

    def _solicitar(
        self, sessao: SessaoLGPD, input_dto: SolicitarExclusaoPortalInputDTO,
    ) -> SolicitacaoOutputDTO:
        titular = _obter_titular(self.titular_repo, sessao.tipo_titular, sessao.titular_id)

        with self.uow:
            solicitacao = SolicitacaoLGPD.criar(
                tipo=TipoSolicitacao.EXCLUSAO,
                titular=titular,
                motivo=input_dto.motivo,
                origem=OrigemSolicitacao.PORTAL_PUBLICO,
            )
            self.solicitacao_repo.save(solicitacao)
            self.sessao_service.consumir(input_dto.session_token)
            self.acesso_repo.add(_log_acesso(
                AcaoAcessoLGPD.SOLICITAR_EXCLUSAO, titular,
                input_dto.ip_address, input_dto.user_agent,
                canal=CanalVerificacao.WEB.value,
            ))
            self.auditoria_repo.add(_log_auditoria_portal(
                acao="SOLICITAR_EXCLUSAO",
                descricao=(
                    f"Titular {titular.nome} ({titular.tipo.value}) solicitou exclusão dos dados "
                    f"via portal público. Motivo: {solicitacao.motivo or 'Não informado'}"
                ),
                registro_id=solicitacao.id,
                ip_address=input_dto.ip_address,
            ))
            self.uow.publish_event(SolicitacaoLGPDCriadaEvent(
                aggregate_id=solicitacao.id,
                tipo=solicitacao.tipo.value,
                tipo_titular=titular.tipo.value,
                titular_id=titular.id,
                titular_email=solicitacao.titular_email,
                origem=solicitacao.origem.value,
            ))

        logger.info(f"[LGPD] Exclusão solicitada pelo portal para {titular.tipo.value}/{titular.id}")
        return SolicitacaoOutputDTO.from_entity(solicitacao)


class ProcessarSolicitacaoService:
    """
    Use Case: Administrador processa (aprova/recusa) uma solicitação.

    Fluxo:
    1. Verificar permissão total no módulo LGPD
    2. Validar a transição ANTES de qualquer efeito irreversível
    3. Aprovação de exportação → motor de exportação
    4. Aplicar transição, auditoria, evento SolicitacaoLGPDProcessada.
       Aprovação de exclusão roda o motor de exclusão na MESMA transação:
       cascata e status concluída são gravados juntos ou nenhum dos dois
    5. Falha no motor: solicitação permanece no status anterior,
       auditoria da falha, exceção propaga

    Reprocessar uma solicitação finalizada é rejeitado
    (TransicaoInvalidaError) e apenas logado, sem nova auditoria.
    """

    def __init__(
        self,
        solicitacao_repo: SolicitacaoLGPDRepository,
        auditoria_repo: LogAuditoriaRepository,
        exportacao_service: ExportarDadosTitularService,
        exclusao_service: ExcluirDadosTitularService,
        uow: UnitOfWork,
        relogio: Relogio = agora_utc,
    ):
        self.solicitacao_repo = solicitacao_repo
        self.auditoria_repo = auditoria_repo
        self.exportacao_service = exportacao_service
        self.exclusao_service = exclusao_service
        self.uow = uow
        self.relogio = relogio

    def _auditar(self, input_dto: ProcessarSolicitacaoInputDTO, acao: str, descricao: str,
                 dados_anteriores=None, dados_novos=None) -> LogAuditoria:
        return LogAuditoria(
            modulo=MODULO_LGPD,
            acao=acao,
            descricao=descricao,
            registro_id=input_dto.solicitacao_id,
            usuario_id=input_dto.responsavel_id,
            usuario_nome=input_dto.responsavel_nome,
            usuario_cargo=input_dto.responsavel_cargo,
            ip_address=input_dto.ip_address,
            dados_anteriores=dados_anteriores,
            dados_novos=dados_novos,
        )

    def _registrar_falha(self, input_dto, acao: str, descricao: str, dados_novos=None) -> None:
        with self.uow:
            self.auditoria_repo.add(self._auditar(input_dto, acao, descricao, dados_novos=dados_novos))

    def execute(self, input_dto: ProcessarSolicitacaoInputDTO) -> ProcessarSolicitacaoOutputDTO:
        """
        Raises:
            PermissaoNegadaError: Cargo sem permissão total
            ValidationError: Status inválido ou recusa sem justificativa
            EntityNotFoundError: Solicitação (ou titular, na exportação) não existe
            TransicaoInvalidaError: Solicitação já finalizada
            ExclusaoFalhouError: Cascata de exclusão falhou
        """
        exigir_permissao_lgpd(input_dto.responsavel_cargo, NivelPermissao.TOTAL)

        try:
            novo_status = StatusSolicitacao.from_string(input_dto.status)
        except ValueError:
            raise ValidationError(f"Status inválido: {input_dto.status}", field="status")

        solicitacao = self.solicitacao_repo.get_by_id(input_dto.solicitacao_id)
        if solicitacao is None:
            raise EntityNotFoundError(
                f"Solicitação {input_dto.solicitacao_id} não encontrada",
                entity_type="SolicitacaoLGPD",
                entity_id=input_dto.solicitacao_id,
            )

        try:
            solicitacao.validar_transicao(
                novo_status, input_dto.responsavel_id, input_dto.justificativa_recusa
            )
        except TransicaoInvalidaError:
            logger.warning(
                f"[LGPD] Tentativa de reprocessar solicitação {solicitacao.id} "
                f"({solicitacao.status.value}) por {input_dto.responsavel_id}"
            )
            raise

        exportacao = None
        exclusao = None
        arquivo_exportacao = None

        if novo_status == StatusSolicitacao.CONCLUIDA:
            if solicitacao.tipo == TipoSolicitacao.EXPORTACAO:
                try:
                    exportacao = self.exportacao_service.execute(
                        solicitacao.tipo_titular, solicitacao.titular_id
                    )
                except DomainException as e:
                    self._registrar_falha(
                        input_dto, "exportacao_falhou",
                        f"Exportação para a solicitação {solicitacao.id} falhou: {e.message}",
                    )
                    raise
                arquivo_exportacao = exportacao.nome_arquivo()

        status_anterior = solicitacao.status.value
        excluir = (
            novo_status == StatusSolicitacao.CONCLUIDA
            and solicitacao.tipo == TipoSolicitacao.EXCLUSAO
        )
        try:
            with self.uow:
                if excluir:
                    # cascata e mudança de status no mesmo commit
                    exclusao = self.exclusao_service.execute(
                        solicitacao.tipo_titular,
                        solicitacao.titular_id,
                        cascade=True,
                        motivo=solicitacao.motivo,
                        solicitacao_id=solicitacao.id,
                        transacao_externa=self.uow,
                    )
                    if not exclusao.sucesso:
                        raise ExclusaoFalhouError(
                            f"Falha na exclusão dos dados do titular: {exclusao.erro}",
                            resultado=exclusao,
                        )

                solicitacao.processar(
                    novo_status,
                    responsavel_id=input_dto.responsavel_id,
                    justificativa_recusa=input_dto.justificativa_recusa,
                    arquivo_exportacao=arquivo_exportacao,
                    agora=self.relogio(),
                )
                self.solicitacao_repo.save(solicitacao)

                acao = {
                    StatusSolicitacao.CONCLUIDA: "aprovar",
                    StatusSolicitacao.RECUSADA: "recusar",
                }.get(novo_status, "atualizar_status")
                dados_novos = {"status": novo_status.value}
                if exclusao is not None:
                    dados_novos["exclusao"] = exclusao.to_dict()
                if arquivo_exportacao:
                    dados_novos["arquivo_exportacao"] = arquivo_exportacao

                self.auditoria_repo.add(self._auditar(
                    input_dto,
                    acao,
                    f"Solicitação de {solicitacao.tipo.value} de {solicitacao.titular_nome} "
                    f"{status_anterior} → {novo_status.value}",
                    dados_anteriores={"status": status_anterior},
                    dados_novos=dados_novos,
                ))
                self.uow.publish_event(SolicitacaoLGPDProcessadaEvent(
                    aggregate_id=solicitacao.id,
                    tipo=solicitacao.tipo.value,
                    status=novo_status.value,
                    responsavel_id=input_dto.responsavel_id,
                    titular_nome=solicitacao.titular_nome,
                    titular_email=solicitacao.titular_email,
                    justificativa_recusa=solicitacao.justificativa_recusa,
                ))
        except ExclusaoFalhouError as e:
            self._registrar_falha(
                input_dto, "exclusao_falhou",
                f"Exclusão dos dados de {solicitacao.titular_nome} falhou: {e.resultado.erro}",
                dados_novos=e.resultado.to_dict(),
            )
            raise
        except Exception:
            if exclusao is not None and exclusao.sucesso:
                logger.error(
                    f"[LGPD] Solicitação {solicitacao.id} não pôde ser concluída após a exclusão "
                    f"de {solicitacao.titular_id} (revertida={self.uow.atomic})"
                )
            raise

        logger.info(
            f"[LGPD] Solicitação {solicitacao.id} processada: "
            f"{status_anterior} → {novo_status.value} por {input_dto.responsavel_id}"
        )
        return ProcessarSolicitacaoOutputDTO(
            solicitacao=SolicitacaoOutputDTO.from_entity(solicitacao),
            exportacao=exportacao,
            exclusao=exclusao,
        )


class ListarSolicitacoesService:
    """Use Case: Listar solicitações com filtros opcionais (sem UoW - leitura)."""

    def __init__(self, solicitacao_repo: SolicitacaoLGPDRepository):
        self.solicitacao_repo = solicitacao_repo

    def execute(
        self,
        usuario_cargo: str,
        status: Optional[str] = None,
        tipo: Optional[str] = None,
    ) -> List[SolicitacaoOutputDTO]:
        exigir_permissao_lgpd(usuario_cargo, NivelPermissao.LEITURA)

        try:
            status_enum = StatusSolicitacao.from_string(status) if status else None
        except ValueError:
            raise ValidationError(f"Status inválido: {status}", field="status")
        try:
            tipo_enum = TipoSolicitacao.from_string(tipo) if tipo else None
        except ValueError:
            raise ValidationError(f"Tipo de solicitação inválido: {tipo}", field="tipo")

        solicitacoes = self.solicitacao_repo.list(status=status_enum, tipo=tipo_enum)
        return [SolicitacaoOutputDTO.from_entity(s) for s in solicitacoes]


class ObterSolicitacaoService:

    def __init__(self, solicitacao_repo: SolicitacaoLGPDRepository):
        self.solicitacao_repo = solicitacao_repo

    def execute(self, solicitacao_id: str, usuario_cargo: str) -> SolicitacaoOutputDTO:
        exigir_permissao_lgpd(usuario_cargo, NivelPermissao.LEITURA)
        solicitacao = self.solicitacao_repo.get_by_id(solicitacao_id)
        if solicitacao is None:
            raise EntityNotFoundError(
                f"Solicitação {solicitacao_id} não encontrada",
                entity_type="SolicitacaoLGPD",
                entity_id=solicitacao_id,
            )
        return SolicitacaoOutputDTO.from_entity(solicitacao)


# =============================================================================
# Consentimento e logs
# =============================================================================

class RegistrarConsentimentoService:
    """
    Use Case: Registrar concessão ou revogação de consentimento.

    Atualiza o estado do titular e grava um LogConsentimento imutável
    na mesma transação.
    """

    def __init__(
        self,
        titular_repo: TitularRepository,
        consentimento_repo: LogConsentimentoRepository,
        auditoria_repo: LogAuditoriaRepository,
        uow: UnitOfWork,
    ):
        self.titular_repo = titular_repo
        self.consentimento_repo = consentimento_repo
        self.auditoria_repo = auditoria_repo
        self.uow = uow

    def execute(self, input_dto: RegistrarConsentimentoInputDTO) -> LogConsentimento:
        """
        Raises:
            PermissaoNegadaError: Cargo sem permissão total
            EntityNotFoundError: Titular não existe
            BusinessRuleViolationError: Consentimento já está no estado informado
        """
        exigir_permissao_lgpd(input_dto.usuario_cargo, NivelPermissao.TOTAL)
        tipo = parse_tipo_titular(input_dto.tipo_titular)
        titular = _obter_titular(self.titular_repo, tipo, input_dto.titular_id)

        with self.uow:
            log = LogConsentimento.registrar(
                titular,
                consentimento_novo=bool(input_dto.consentimento),
                usuario_id=input_dto.usuario_id,
                ip_address=input_dto.ip_address,
            )
            self.consentimento_repo.add(log)
            self.titular_repo.atualizar_consentimento(tipo, titular.id, log.consentimento_novo)
            self.auditoria_repo.add(LogAuditoria(
                modulo=MODULO_LGPD,
                acao=f"consentimento_{log.acao.value}",
                descricao=f"Consentimento de {titular.nome} ({tipo.value}) {log.acao.value}",
                registro_id=titular.id,
                usuario_id=input_dto.usuario_id,
                usuario_nome=input_dto.usuario_nome,
                usuario_cargo=input_dto.usuario_cargo,
                ip_address=input_dto.ip_address,
                dados_anteriores={"consentimento_lgpd": log.consentimento_anterior},
                dados_novos={"consentimento_lgpd": log.consentimento_novo},
            ))
            self.uow.publish_event(ConsentimentoAlteradoEvent(
                aggregate_id=titular.id,
                tipo_titular=tipo.value,
                acao=log.acao.value,
                consentimento_novo=log.consentimento_novo,
                usuario_id=input_dto.usuario_id,
            ))

        return log


class ListarLogsConsentimentoService:

    def __init__(self, consentimento_repo: LogConsentimentoRepository):
        self.consentimento_repo = consentimento_repo

    def execute(self, usuario_cargo: str, limit: Optional[int] = None) -> List[LogConsentimento]:
        exigir_permissao_lgpd(usuario_cargo, NivelPermissao.LEITURA)
        return self.consentimento_repo.list_all(limit=limit)


class ListarLogsAuditoriaService:

    def __init__(self, auditoria_repo: LogAuditoriaRepository):
        self.auditoria_repo = auditoria_repo

    def execute(
        self,
        usuario_cargo: str,
        modulo: Optional[str] = None,
        registro_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LogAuditoria]:
        exigir_permissao_lgpd(usuario_cargo, NivelPermissao.LEITURA)
        return self.auditoria_repo.list_all(modulo=modulo, registro_id=registro_id, limit=limit)
