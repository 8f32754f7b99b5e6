"""
Testes do fluxo do portal público (código → sessão → ação).

Coverage:
- SolicitarCodigoService: resposta genérica, não reemissão, erros de canal
- ValidarCodigoService: código incorreto, tentativas, expiração
- SessaoLGPDService: validade de 30 minutos, consumo
- ExportarDadosPortalService / SolicitarExclusaoPortalService (inclusive falhas no log de acesso)
"""

import copy
from unittest import mock

import pytest

from portal_lgpd.core.lgpd.dtos import (
    MENSAGEM_CODIGO_GENERICA,
    ExportarDadosPortalInputDTO,
    SolicitarCodigoInputDTO,
    SolicitarExclusaoPortalInputDTO,
    ValidarCodigoInputDTO,
)
from portal_lgpd.core.lgpd.entities import (
    AcaoAcessoLGPD,
    OrigemSolicitacao,
    StatusSolicitacao,
    TipoSolicitacao,
    TipoTitular,
)
from portal_lgpd.core.lgpd.events import (
    DadosTitularExportadosEvent,
    SolicitacaoLGPDCriadaEvent,
)
from portal_lgpd.core.lgpd.ports import InMemoryCanalEnvio
from portal_lgpd.core.lgpd.use_cases import (
    ExportarDadosPortalService,
    ExportarDadosTitularService,
    SessaoLGPDService,
    SolicitarCodigoService,
    SolicitarExclusaoPortalService,
    ValidarCodigoService,
)
from portal_lgpd.core.lgpd.verificacao import VerificacaoCodigoService
from portal_lgpd.core.shared.exceptions import (
    AuthenticationError,
    ChannelDeliveryError,
    ConfiguracaoCanalError,
    EntityNotFoundError,
    TentativasExcedidasError,
    ValidationError,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def solicitar_service(titular_repo, token_repo, acesso_repo, verificacao_service, uow, relogio):
    return SolicitarCodigoService(
        titular_repo, token_repo, acesso_repo, verificacao_service, uow, relogio=relogio,
    )


@pytest.fixture
def validar_service(titular_repo, token_repo, acesso_repo, uow, relogio):
    return ValidarCodigoService(titular_repo, token_repo, acesso_repo, uow, relogio=relogio)


@pytest.fixture
def sessao_service(token_repo, relogio):
    return SessaoLGPDService(token_repo, relogio=relogio)


def _pedido(nome="Maria Silva", cpf="123.456.789-01", data="1990-05-10", **kwargs):
    return SolicitarCodigoInputDTO(
        nome=nome, cpf=cpf, data_nascimento=data,
        ip_address="10.0.0.1", user_agent="pytest", **kwargs,
    )


def _validacao(codigo, cpf="12345678901", data="1990-05-10"):
    return ValidarCodigoInputDTO(
        codigo=codigo, cpf=cpf, data_nascimento=data, ip_address="10.0.0.1", user_agent="pytest",
    )


def _codigo_errado(correto: str) -> str:
    return "100000" if correto != "100000" else "100001"


@pytest.fixture
def sessao_autenticada(membro_com_dados, solicitar_service, validar_service, captura_sms):
    """Executa o fluxo completo e retorna o session_token."""
    solicitar_service.execute(_pedido())
    return validar_service.execute(_validacao(captura_sms.ultimo_codigo)).session_token


# =============================================================================
# Solicitar código
# =============================================================================

class TestSolicitarCodigo:
    """Testes para SolicitarCodigoService."""

    def test_envia_codigo_por_sms(self, membro_com_dados, solicitar_service, canal_sms, captura_sms, token_repo, acesso_repo):
        """Deve enviar código por SMS e persistir apenas o hash."""
        output = solicitar_service.execute(_pedido())

        assert output.message == MENSAGEM_CODIGO_GENERICA
        assert output.canal == "sms"
        assert len(canal_sms.enviados) == 1

        token = next(iter(token_repo.tokens.values()))
        codigo = captura_sms.ultimo_codigo
        assert codigo not in token.hashed_codigo
        assert token.titular_id == "m-1"
        assert acesso_repo.logs[-1].sucesso
        assert acesso_repo.logs[-1].acao == AcaoAcessoLGPD.SOLICITAR_CODIGO

    def test_nome_sem_diferenciar_caixa(self, membro_com_dados, solicitar_service, canal_sms):
        """Deve casar o nome sem diferenciar maiúsculas e espaços."""
        output = solicitar_service.execute(_pedido(nome="  MARIA silva "))
        assert output.canal == "sms"

    def test_titular_inexistente_resposta_generica(self, membro_com_dados, solicitar_service, canal_sms, acesso_repo):
        """Deve responder igual e registrar a falha quando o titular não existe."""
        output = solicitar_service.execute(_pedido(cpf="00000000000"))

        assert output.message == MENSAGEM_CODIGO_GENERICA
        assert output.canal is None
        assert canal_sms.enviados == []
        assert acesso_repo.logs[-1].sucesso is False
        assert acesso_repo.logs[-1].motivo_falha == "titular_nao_encontrado"
        assert acesso_repo.logs[-1].titular_id == "unknown"

    def test_nao_reemite_codigo_pendente(self, membro_com_dados, solicitar_service, canal_sms, token_repo, acesso_repo):
        """Deve manter o código existente enquanto estiver válido."""
        solicitar_service.execute(_pedido())
        output = solicitar_service.execute(_pedido())

        assert output.canal is None
        assert output.message == MENSAGEM_CODIGO_GENERICA
        assert len(canal_sms.enviados) == 1
        assert len(token_repo.tokens) == 1
        assert acesso_repo.logs[-1].motivo_falha == "codigo_ja_enviado"

    def test_reemite_apos_expiracao(self, membro_com_dados, solicitar_service, canal_sms, relogio):
        """Deve emitir novo código depois que o anterior expira."""
        solicitar_service.execute(_pedido())
        relogio.avancar(minutes=11)

        output = solicitar_service.execute(_pedido())

        assert output.canal == "sms"
        assert len(canal_sms.enviados) == 2

    def test_reemite_apos_tentativas_esgotadas(
        self, membro_com_dados, solicitar_service, validar_service, captura_sms, canal_sms, token_repo,
    ):
        """Deve revogar o código esgotado e emitir outro."""
        solicitar_service.execute(_pedido())
        errado = _codigo_errado(captura_sms.ultimo_codigo)
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                validar_service.execute(_validacao(errado))

        output = solicitar_service.execute(_pedido())

        assert output.canal == "sms"
        assert len(canal_sms.enviados) == 2
        revogados = [t for t in token_repo.tokens.values() if t.revogado]
        assert len(revogados) == 1

    def test_fallback_para_email(self, titular_repo, membro, token_repo, acesso_repo, canal_email, uow, relogio):
        """Deve usar email quando o SMS falha."""
        titular_repo.add(membro)
        verificacao = VerificacaoCodigoService(
            canal_sms=InMemoryCanalEnvio("sms", falhar=True), canal_email=canal_email, bcrypt_rounds=4,
        )
        service = SolicitarCodigoService(
            titular_repo, token_repo, acesso_repo, verificacao, uow, relogio=relogio,
        )

        output = service.execute(_pedido())

        assert output.canal == "email"
        assert canal_email.enviados[0]["destino"] == "maria@exemplo.com"

    def test_todos_os_canais_falham(self, titular_repo, membro, token_repo, acesso_repo, uow, relogio):
        """Deve lançar ChannelDeliveryError e não persistir token."""
        titular_repo.add(membro)
        verificacao = VerificacaoCodigoService(
            canal_sms=InMemoryCanalEnvio("sms", falhar=True),
            canal_email=InMemoryCanalEnvio("email", falhar=True),
            bcrypt_rounds=4,
        )
        service = SolicitarCodigoService(
            titular_repo, token_repo, acesso_repo, verificacao, uow, relogio=relogio,
        )

        with pytest.raises(ChannelDeliveryError):
            service.execute(_pedido())

        assert token_repo.tokens == {}
        assert acesso_repo.logs[-1].motivo_falha.startswith("erro_envio")

    def test_titular_sem_contato(self, titular_repo, membro, solicitar_service, token_repo):
        """Deve lançar ConfiguracaoCanalError quando não há telefone nem email."""
        membro.telefone = None
        membro.email = None
        titular_repo.add(membro)

        with pytest.raises(ConfiguracaoCanalError):
            solicitar_service.execute(_pedido())
        assert token_repo.tokens == {}

    def test_telefone_informado_usado_quando_cadastro_nao_tem(
        self, titular_repo, visitante, solicitar_service, canal_sms,
    ):
        """Deve usar o telefone do pedido quando o cadastro não tem."""
        titular_repo.add(visitante)

        output = solicitar_service.execute(
            _pedido(nome="João Souza", cpf="987.654.321-00", data="1985-01-20", telefone="11912345678")
        )

        assert output.canal == "sms"
        assert canal_sms.enviados[0]["destino"] == "+5511912345678"

    @pytest.mark.parametrize("kwargs,campo", [
        ({"nome": "Ma"}, "nome"),
        ({"cpf": "123"}, "cpf"),
        ({"data": "10/05/1990"}, "data_nascimento"),
        ({"data": "1990-13-40"}, "data_nascimento"),
    ])
    def test_entrada_invalida(self, solicitar_service, kwargs, campo):
        """Deve validar nome, CPF e data antes de qualquer consulta."""
        with pytest.raises(ValidationError) as exc_info:
            solicitar_service.execute(_pedido(**kwargs))
        assert exc_info.value.field == campo


# =============================================================================
# Validar código
# =============================================================================

class TestValidarCodigo:
    """Testes para ValidarCodigoService."""

    def test_codigo_correto_emite_sessao(self, membro_com_dados, solicitar_service, validar_service, captura_sms, relogio):
        """Deve emitir sessão de 30 minutos para o código correto."""
        solicitar_service.execute(_pedido())

        output = validar_service.execute(_validacao(captura_sms.ultimo_codigo))

        assert output.session_token
        assert output.titular_nome == "Maria Silva"
        assert output.titular_tipo == "membro"
        assert (output.expires_at - relogio()).total_seconds() == 30 * 60

    def test_codigo_incorreto_incrementa_tentativas(
        self, membro_com_dados, solicitar_service, validar_service, captura_sms, token_repo, acesso_repo,
    ):
        """Deve persistir a tentativa incorreta."""
        solicitar_service.execute(_pedido())

        with pytest.raises(AuthenticationError):
            validar_service.execute(_validacao(_codigo_errado(captura_sms.ultimo_codigo)))

        token = next(iter(token_repo.tokens.values()))
        assert token.tentativas_validacao == 1
        assert not token.validado
        assert acesso_repo.logs[-1].motivo_falha == "codigo_incorreto"

    def test_tentativas_excedidas(self, membro_com_dados, solicitar_service, validar_service, captura_sms):
        """Deve bloquear após 3 tentativas, mesmo com o código correto."""
        solicitar_service.execute(_pedido())
        correto = captura_sms.ultimo_codigo
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                validar_service.execute(_validacao(_codigo_errado(correto)))

        with pytest.raises(TentativasExcedidasError):
            validar_service.execute(_validacao(correto))

    def test_codigo_expirado(self, membro_com_dados, solicitar_service, validar_service, captura_sms, relogio):
        """Deve rejeitar o código após 10 minutos."""
        solicitar_service.execute(_pedido())
        relogio.avancar(minutes=10)

        with pytest.raises(AuthenticationError) as exc_info:
            validar_service.execute(_validacao(captura_sms.ultimo_codigo))
        assert exc_info.value.motivo == "codigo_nao_encontrado_ou_expirado"

    def test_codigo_nao_reutilizavel(self, membro_com_dados, solicitar_service, validar_service, captura_sms):
        """Deve rejeitar o mesmo código depois de validado."""
        solicitar_service.execute(_pedido())
        codigo = captura_sms.ultimo_codigo
        validar_service.execute(_validacao(codigo))

        with pytest.raises(AuthenticationError):
            validar_service.execute(_validacao(codigo))

    def test_titular_desconhecido(self, membro_com_dados, validar_service):
        """Deve usar a mesma mensagem genérica para titular inexistente."""
        with pytest.raises(AuthenticationError) as exc_info:
            validar_service.execute(_validacao("123456", cpf="00000000000"))
        assert exc_info.value.message == "Código inválido ou expirado."

    @pytest.mark.parametrize("codigo", ["12345", "abcdef", "1234567", ""])
    def test_formato_invalido(self, validar_service, codigo):
        """Deve exigir exatamente 6 dígitos."""
        with pytest.raises(ValidationError) as exc_info:
            validar_service.execute(_validacao(codigo))
        assert exc_info.value.field == "codigo"


# =============================================================================
# Sessão
# =============================================================================

class TestSessao:
    """Testes para SessaoLGPDService."""

    def test_sessao_valida(self, sessao_autenticada, sessao_service):
        """Deve resolver a sessão para o titular."""
        sessao = sessao_service.validar_sessao(sessao_autenticada)
        assert sessao.titular_id == "m-1"

    def test_sessao_expira_em_trinta_minutos(self, sessao_autenticada, sessao_service, relogio):
        """Deve expirar 30 minutos após a validação."""
        relogio.avancar(minutes=29)
        sessao_service.validar_sessao(sessao_autenticada)

        relogio.avancar(minutes=1)
        with pytest.raises(AuthenticationError):
            sessao_service.validar_sessao(sessao_autenticada)

    @pytest.mark.parametrize("token", [None, "", "desconhecido"])
    def test_sessao_ausente_ou_desconhecida(self, sessao_service, token):
        """Deve rejeitar sessão ausente ou desconhecida."""
        with pytest.raises(AuthenticationError):
            sessao_service.validar_sessao(token)

    def test_consumir_revoga(self, sessao_autenticada, sessao_service):
        """Deve revogar a sessão ao consumir."""
        sessao_service.consumir(sessao_autenticada)
        with pytest.raises(AuthenticationError):
            sessao_service.validar_sessao(sessao_autenticada)

    def test_consumir_sessao_revogada_apos_leitura(self, sessao_autenticada, sessao_service, token_repo):
        """Deve falhar se outra ação revogou a sessão entre a leitura e o consumo."""
        lido_antes = copy.copy(token_repo.get_by_session_token(sessao_autenticada))
        sessao_service.consumir(sessao_autenticada)

        with mock.patch.object(token_repo, "get_by_session_token", return_value=lido_antes):
            with pytest.raises(AuthenticationError) as exc_info:
                sessao_service.consumir(sessao_autenticada)

        assert exc_info.value.motivo == "sessao_invalida"


# =============================================================================
# Ações do portal
# =============================================================================

class TestExportarDadosPortal:
    """Testes para ExportarDadosPortalService."""

    @pytest.fixture
    def service(self, titular_repo, dados_repo, consentimento_repo, sessao_service,
                acesso_repo, auditoria_repo, uow, relogio):
        exportacao = ExportarDadosTitularService(
            titular_repo, dados_repo, consentimento_repo, relogio=relogio,
        )
        return ExportarDadosPortalService(exportacao, sessao_service, acesso_repo, auditoria_repo, uow)

    def test_exporta_e_consome_sessao(self, sessao_autenticada, service, sessao_service, auditoria_repo, uow):
        """Deve exportar os dados do titular da sessão e consumi-la."""
        output = service.execute(ExportarDadosPortalInputDTO(session_token=sessao_autenticada))

        assert output.dados.titular_id == "m-1"
        assert output.nome_arquivo.startswith("lgpd_export_membro_m-1_")
        assert auditoria_repo.logs[-1].acao == "EXPORTAR_DADOS"
        assert auditoria_repo.logs[-1].usuario_cargo == "SISTEMA"
        assert any(isinstance(e, DadosTitularExportadosEvent) for e in uow.published_events)

        with pytest.raises(AuthenticationError):
            sessao_service.validar_sessao(sessao_autenticada)

    def test_sessao_invalida(self, service, auditoria_repo):
        """Deve rejeitar sem exportar nada."""
        with pytest.raises(AuthenticationError):
            service.execute(ExportarDadosPortalInputDTO(session_token="invalido"))
        assert auditoria_repo.logs == []


class TestSolicitarExclusaoPortal:
    """Testes para SolicitarExclusaoPortalService."""

    @pytest.fixture
    def service(self, titular_repo, solicitacao_repo, sessao_service, acesso_repo, auditoria_repo, uow):
        return SolicitarExclusaoPortalService(
            titular_repo, solicitacao_repo, sessao_service, acesso_repo, auditoria_repo, uow,
        )

    def test_cria_solicitacao_pendente(
        self, sessao_autenticada, service, titular_repo, dados_repo, acesso_repo, uow,
    ):
        """Deve criar solicitação PENDENTE sem excluir dados."""
        output = service.execute(SolicitarExclusaoPortalInputDTO(
            session_token=sessao_autenticada, motivo="Mudei de cidade",
        ))

        assert output.status == StatusSolicitacao.PENDENTE.value
        assert output.tipo == TipoSolicitacao.EXCLUSAO.value
        assert output.origem == OrigemSolicitacao.PORTAL_PUBLICO.value
        assert output.motivo == "Mudei de cidade"
        assert titular_repo.get(TipoTitular.MEMBRO, "m-1") is not None
        assert len(dados_repo.notas) == 3
        assert acesso_repo.logs[-1].acao == AcaoAcessoLGPD.SOLICITAR_EXCLUSAO
        assert any(isinstance(e, SolicitacaoLGPDCriadaEvent) for e in uow.published_events)

    def test_sessao_de_uso_unico(self, sessao_autenticada, service):
        """Deve rejeitar uma segunda ação com a mesma sessão."""
        service.execute(SolicitarExclusaoPortalInputDTO(session_token=sessao_autenticada))

        with pytest.raises(AuthenticationError):
            service.execute(SolicitarExclusaoPortalInputDTO(session_token=sessao_autenticada))

    def test_falha_registra_log_de_acesso(self, sessao_autenticada, service, solicitacao_repo, acesso_repo, sessao_service):
        """Deve registrar a falha no log de acesso e propagar o erro."""
        solicitacao_repo.save = mock.MagicMock(side_effect=RuntimeError("banco indisponível"))

        with pytest.raises(RuntimeError):
            service.execute(SolicitarExclusaoPortalInputDTO(session_token=sessao_autenticada))

        log = acesso_repo.logs[-1]
        assert log.acao == AcaoAcessoLGPD.SOLICITAR_EXCLUSAO
        assert log.sucesso is False
        assert log.titular_id == "m-1"
        assert log.motivo_falha == "erro_interno: banco indisponível"
        sessao_service.validar_sessao(sessao_autenticada)

    def test_titular_removido_registra_falha(self, sessao_autenticada, service, titular_repo, acesso_repo):
        titular_repo.delete(TipoTitular.MEMBRO, "m-1")

        with pytest.raises(EntityNotFoundError):
            service.execute(SolicitarExclusaoPortalInputDTO(session_token=sessao_autenticada))

        assert acesso_repo.logs[-1].motivo_falha.startswith("erro_interno: ")

    def test_motivo_muito_longo(self, sessao_autenticada, service, solicitacao_repo, sessao_service):
        """Deve rejeitar motivo longo e manter a sessão válida."""
        with pytest.raises(ValidationError):
            service.execute(SolicitarExclusaoPortalInputDTO(
                session_token=sessao_autenticada, motivo="x" * 1001,
            ))

        assert solicitacao_repo.list() == []
        sessao_service.validar_sessao(sessao_autenticada)
