"""
Testes dos Use Cases administrativos do Domínio LGPD.

Coverage:
- CriarSolicitacaoService
- ProcessarSolicitacaoService: recusa, exportação, exclusão, falhas, reprocessamento
- ListarSolicitacoesService / ObterSolicitacaoService
- RegistrarConsentimentoService
- ListarLogsConsentimentoService / ListarLogsAuditoriaService
"""

from unittest.mock import MagicMock

import pytest

from portal_lgpd.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from portal_lgpd.core.lgpd.dtos import (
    CriarSolicitacaoInputDTO,
    ProcessarSolicitacaoInputDTO,
    RegistrarConsentimentoInputDTO,
)
from portal_lgpd.core.lgpd.entities import (
    AcaoConsentimento,
    StatusSolicitacao,
    TipoTitular,
)
from portal_lgpd.core.lgpd.events import (
    ConsentimentoAlteradoEvent,
    SolicitacaoLGPDCriadaEvent,
    SolicitacaoLGPDProcessadaEvent,
)
from portal_lgpd.core.lgpd.use_cases import (
    CriarSolicitacaoService,
    ExcluirDadosTitularService,
    ExportarDadosTitularService,
    ListarLogsAuditoriaService,
    ListarLogsConsentimentoService,
    ListarSolicitacoesService,
    ObterSolicitacaoService,
    ProcessarSolicitacaoService,
    RegistrarConsentimentoService,
)
from portal_lgpd.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ExclusaoFalhouError,
    PermissaoNegadaError,
    TransicaoInvalidaError,
    ValidationError,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def criar_service(titular_repo, solicitacao_repo, auditoria_repo, uow):
    return CriarSolicitacaoService(titular_repo, solicitacao_repo, auditoria_repo, uow)


@pytest.fixture
def processar_service(titular_repo, dados_repo, consentimento_repo, solicitacao_repo, auditoria_repo, uow, relogio):
    exportacao = ExportarDadosTitularService(titular_repo, dados_repo, consentimento_repo, relogio=relogio)
    exclusao = ExcluirDadosTitularService(titular_repo, dados_repo, consentimento_repo, uow, relogio=relogio)
    return ProcessarSolicitacaoService(
        solicitacao_repo, auditoria_repo, exportacao, exclusao, uow, relogio=relogio,
    )


def _criar(tipo="exclusao", cargo="PASTOR", titular_id="m-1", tipo_titular="membro", motivo=None):
    return CriarSolicitacaoInputDTO(
        tipo=tipo,
        tipo_titular=tipo_titular,
        titular_id=titular_id,
        usuario_id="7",
        usuario_nome="Pr. Carlos",
        usuario_cargo=cargo,
        motivo=motivo,
        ip_address="10.0.0.5",
    )


def _processar(solicitacao_id, status="concluida", cargo="PASTOR", justificativa=None):
    return ProcessarSolicitacaoInputDTO(
        solicitacao_id=solicitacao_id,
        status=status,
        responsavel_id="7",
        responsavel_nome="Pr. Carlos",
        responsavel_cargo=cargo,
        justificativa_recusa=justificativa,
        ip_address="10.0.0.5",
    )


# =============================================================================
# Criar
# =============================================================================

class TestCriarSolicitacao:
    """Testes para CriarSolicitacaoService."""

    def test_cria_pendente(self, membro_com_dados, criar_service, auditoria_repo, uow):
        """Deve criar solicitação PENDENTE com auditoria e evento."""
        output = criar_service.execute(_criar(motivo="Pedido por telefone"))

        assert output.status == "pendente"
        assert output.origem == "admin"
        assert output.titular_nome == "Maria Silva"
        assert auditoria_repo.logs[-1].acao == "criar"
        assert auditoria_repo.logs[-1].registro_id == output.id
        assert isinstance(uow.published_events[-1], SolicitacaoLGPDCriadaEvent)

    @pytest.mark.parametrize("cargo", ["PRESBITERO", "TESOUREIRO", "DIACONO", ""])
    def test_exige_permissao_total(self, membro_com_dados, criar_service, solicitacao_repo, cargo):
        """Deve negar cargos sem permissão total."""
        with pytest.raises(PermissaoNegadaError):
            criar_service.execute(_criar(cargo=cargo))
        assert solicitacao_repo.list() == []

    def test_tipo_invalido(self, membro_com_dados, criar_service):
        """Deve rejeitar tipo de solicitação desconhecido."""
        with pytest.raises(ValidationError) as exc_info:
            criar_service.execute(_criar(tipo="retificacao"))
        assert exc_info.value.field == "tipo"

    def test_titular_inexistente(self, criar_service):
        """Deve lançar EntityNotFoundError para titular desconhecido."""
        with pytest.raises(EntityNotFoundError):
            criar_service.execute(_criar(titular_id="nao-existe"))


# =============================================================================
# Processar
# =============================================================================

class TestProcessarSolicitacao:
    """Testes para ProcessarSolicitacaoService."""

    def test_recusa_com_justificativa(self, membro_com_dados, criar_service, processar_service, titular_repo, uow):
        """Deve recusar sem disparar exclusão."""
        solicitacao = criar_service.execute(_criar())

        output = processar_service.execute(
            _processar(solicitacao.id, status="recusada", justificativa="Obrigação legal de guarda")
        )

        assert output.solicitacao.status == "recusada"
        assert output.solicitacao.justificativa_recusa == "Obrigação legal de guarda"
        assert output.exclusao is None
        assert titular_repo.get(TipoTitular.MEMBRO, "m-1") is not None
        evento = uow.published_events[-1]
        assert isinstance(evento, SolicitacaoLGPDProcessadaEvent)
        assert evento.status == "recusada"

    def test_recusa_sem_justificativa(self, membro_com_dados, criar_service, processar_service, solicitacao_repo):
        """Deve rejeitar e manter PENDENTE."""
        solicitacao = criar_service.execute(_criar())

        with pytest.raises(ValidationError):
            processar_service.execute(_processar(solicitacao.id, status="recusada", justificativa=" "))

        assert solicitacao_repo.get_by_id(solicitacao.id).status == StatusSolicitacao.PENDENTE

    def test_aprovar_exportacao(self, membro_com_dados, criar_service, processar_service, auditoria_repo):
        """Deve montar o pacote e registrar o nome do arquivo."""
        solicitacao = criar_service.execute(_criar(tipo="exportacao"))

        output = processar_service.execute(_processar(solicitacao.id))

        assert output.solicitacao.status == "concluida"
        assert output.exportacao is not None
        assert output.solicitacao.arquivo_exportacao == output.exportacao.nome_arquivo()
        assert auditoria_repo.logs[-1].acao == "aprovar"
        assert auditoria_repo.logs[-1].dados_novos["arquivo_exportacao"] == output.solicitacao.arquivo_exportacao

    def test_aprovar_exclusao(self, membro_com_dados, criar_service, processar_service, titular_repo, dados_repo):
        """Deve executar a cascata e concluir a solicitação."""
        solicitacao = criar_service.execute(_criar(motivo="Saiu da igreja"))

        output = processar_service.execute(_processar(solicitacao.id))

        assert output.solicitacao.status == "concluida"
        assert output.solicitacao.data_atendimento is not None
        assert output.solicitacao.responsavel_id == "7"
        assert output.exclusao.sucesso
        assert output.exclusao.solicitacao_id == solicitacao.id
        assert output.exclusao.motivo == "Saiu da igreja"
        assert titular_repo.get(TipoTitular.MEMBRO, "m-1") is None
        assert len(dados_repo.notas) == 1

    def test_solicitacao_sobrevive_a_exclusao(self, membro_com_dados, criar_service, processar_service, solicitacao_repo):
        """Deve manter a solicitação com o nome do titular após a exclusão."""
        solicitacao = criar_service.execute(_criar())
        processar_service.execute(_processar(solicitacao.id))

        guardada = solicitacao_repo.get_by_id(solicitacao.id)
        assert guardada.titular_nome == "Maria Silva"
        assert guardada.status == StatusSolicitacao.CONCLUIDA

    def test_aprovar_acesso_sem_efeitos(self, membro_com_dados, criar_service, processar_service):
        """Deve concluir solicitação de acesso sem exportar nem excluir."""
        solicitacao = criar_service.execute(_criar(tipo="acesso"))

        output = processar_service.execute(_processar(solicitacao.id))

        assert output.solicitacao.status == "concluida"
        assert output.exportacao is None
        assert output.exclusao is None

    def test_em_andamento_depois_concluida(self, membro_com_dados, criar_service, processar_service):
        """Deve permitir marcar em andamento antes de concluir."""
        solicitacao = criar_service.execute(_criar(tipo="acesso"))

        processar_service.execute(_processar(solicitacao.id, status="em_andamento"))
        output = processar_service.execute(_processar(solicitacao.id))

        assert output.solicitacao.status == "concluida"

    def test_reprocessar_rejeitado_sem_auditoria(
        self, membro_com_dados, criar_service, processar_service, auditoria_repo,
    ):
        """Deve rejeitar reprocessamento sem nova auditoria nem nova exclusão."""
        solicitacao = criar_service.execute(_criar())
        processar_service.execute(_processar(solicitacao.id))
        total_logs = len(auditoria_repo.logs)
        processar_service.exclusao_service = MagicMock()

        with pytest.raises(TransicaoInvalidaError):
            processar_service.execute(_processar(solicitacao.id))
        with pytest.raises(TransicaoInvalidaError):
            processar_service.execute(_processar(solicitacao.id, status="recusada", justificativa="x"))

        assert len(auditoria_repo.logs) == total_logs
        processar_service.exclusao_service.execute.assert_not_called()

    def test_falha_na_exclusao_mantem_pendente(
        self, membro_com_dados, criar_service, processar_service, titular_repo, solicitacao_repo, auditoria_repo,
    ):
        """Deve lançar ExclusaoFalhouError, auditar a falha e manter PENDENTE."""
        solicitacao = criar_service.execute(_criar())
        titular_repo.delete = MagicMock(side_effect=RuntimeError("constraint violada"))

        with pytest.raises(ExclusaoFalhouError) as exc_info:
            processar_service.execute(_processar(solicitacao.id))

        resultado = exc_info.value.resultado
        assert resultado.sucesso is False
        assert resultado.registros_excluidos.notas_pastorais == 2
        assert solicitacao_repo.get_by_id(solicitacao.id).status == StatusSolicitacao.PENDENTE
        assert auditoria_repo.logs[-1].acao == "exclusao_falhou"
        assert auditoria_repo.logs[-1].dados_novos["sucesso"] is False

    def test_falha_ao_concluir_descarta_evento_de_exclusao(
        self, membro_com_dados, criar_service, titular_repo, dados_repo, consentimento_repo,
        solicitacao_repo, auditoria_repo, relogio,
    ):
        """Deve descartar o evento de exclusão quando a conclusão falha."""
        uow_exclusao, uow_processar = InMemoryUnitOfWork(), InMemoryUnitOfWork()
        service = ProcessarSolicitacaoService(
            solicitacao_repo, auditoria_repo,
            ExportarDadosTitularService(titular_repo, dados_repo, consentimento_repo, relogio=relogio),
            ExcluirDadosTitularService(titular_repo, dados_repo, consentimento_repo, uow_exclusao, relogio=relogio),
            uow_processar,
            relogio=relogio,
        )
        solicitacao = criar_service.execute(_criar())
        solicitacao_repo.save = MagicMock(side_effect=RuntimeError("deadlock detectado"))

        with pytest.raises(RuntimeError):
            service.execute(_processar(solicitacao.id))

        assert uow_processar.rolled_back
        assert uow_processar.published_events == []
        assert uow_exclusao.published_events == []
        assert auditoria_repo.logs[-1].acao == "criar"

    def test_falha_na_exportacao_mantem_pendente(
        self, membro_com_dados, criar_service, processar_service, titular_repo, solicitacao_repo, auditoria_repo,
    ):
        """Deve propagar a falha da exportação e manter PENDENTE."""
        solicitacao = criar_service.execute(_criar(tipo="exportacao"))
        titular_repo.delete(TipoTitular.MEMBRO, "m-1")

        with pytest.raises(EntityNotFoundError):
            processar_service.execute(_processar(solicitacao.id))

        assert solicitacao_repo.get_by_id(solicitacao.id).status == StatusSolicitacao.PENDENTE
        assert auditoria_repo.logs[-1].acao == "exportacao_falhou"

    def test_exige_permissao_total(self, membro_com_dados, criar_service, processar_service):
        """Deve negar presbítero (somente leitura)."""
        solicitacao = criar_service.execute(_criar())
        with pytest.raises(PermissaoNegadaError):
            processar_service.execute(_processar(solicitacao.id, cargo="PRESBITERO"))

    def test_status_invalido(self, membro_com_dados, criar_service, processar_service):
        solicitacao = criar_service.execute(_criar())
        with pytest.raises(ValidationError) as exc_info:
            processar_service.execute(_processar(solicitacao.id, status="arquivada"))
        assert exc_info.value.field == "status"

    def test_solicitacao_inexistente(self, processar_service):
        with pytest.raises(EntityNotFoundError):
            processar_service.execute(_processar("nao-existe"))


# =============================================================================
# Consultas
# =============================================================================

class TestConsultarSolicitacoes:
    """Testes para ListarSolicitacoesService e ObterSolicitacaoService."""

    def test_listar_com_filtros(self, membro_com_dados, criar_service, processar_service, solicitacao_repo):
        """Deve filtrar por status e tipo."""
        exclusao = criar_service.execute(_criar())
        criar_service.execute(_criar(tipo="acesso"))
        processar_service.execute(_processar(exclusao.id, status="recusada", justificativa="Guarda legal"))

        service = ListarSolicitacoesService(solicitacao_repo)

        assert len(service.execute("PRESBITERO")) == 2
        assert [s.id for s in service.execute("PASTOR", status="recusada")] == [exclusao.id]
        assert [s.tipo for s in service.execute("PASTOR", tipo="acesso")] == ["acesso"]

    def test_listar_filtro_invalido(self, solicitacao_repo):
        with pytest.raises(ValidationError):
            ListarSolicitacoesService(solicitacao_repo).execute("PASTOR", status="arquivada")

    def test_listar_exige_leitura(self, solicitacao_repo):
        with pytest.raises(PermissaoNegadaError):
            ListarSolicitacoesService(solicitacao_repo).execute("DIACONO")

    def test_obter(self, membro_com_dados, criar_service, solicitacao_repo):
        """Deve retornar a solicitação pelo id."""
        criada = criar_service.execute(_criar())
        service = ObterSolicitacaoService(solicitacao_repo)

        assert service.execute(criada.id, "PRESBITERO").id == criada.id
        with pytest.raises(EntityNotFoundError):
            service.execute("nao-existe", "PASTOR")


# =============================================================================
# Consentimento e logs
# =============================================================================

class TestRegistrarConsentimento:
    """Testes para RegistrarConsentimentoService."""

    @pytest.fixture
    def service(self, titular_repo, consentimento_repo, auditoria_repo, uow):
        return RegistrarConsentimentoService(titular_repo, consentimento_repo, auditoria_repo, uow)

    def _input(self, consentimento, cargo="PASTOR"):
        return RegistrarConsentimentoInputDTO(
            tipo_titular="membro",
            titular_id="m-1",
            consentimento=consentimento,
            usuario_id="7",
            usuario_nome="Pr. Carlos",
            usuario_cargo=cargo,
            ip_address="10.0.0.5",
        )

    def test_revogar(self, membro_com_dados, service, titular_repo, consentimento_repo, auditoria_repo, uow):
        """Deve atualizar o titular e gravar log imutável."""
        log = service.execute(self._input(False))

        assert log.acao == AcaoConsentimento.REVOGADO
        assert titular_repo.get(TipoTitular.MEMBRO, "m-1").consentimento_lgpd is False
        assert consentimento_repo.logs == [log]
        assert auditoria_repo.logs[-1].acao == "consentimento_revogado"
        assert isinstance(uow.published_events[-1], ConsentimentoAlteradoEvent)

    def test_inalterado(self, membro_com_dados, service, consentimento_repo):
        """Deve rejeitar consentimento igual ao atual."""
        with pytest.raises(BusinessRuleViolationError):
            service.execute(self._input(True))
        assert consentimento_repo.logs == []

    def test_exige_permissao_total(self, membro_com_dados, service):
        with pytest.raises(PermissaoNegadaError):
            service.execute(self._input(False, cargo="PRESBITERO"))


class TestListarLogs:
    """Testes para ListarLogsConsentimentoService e ListarLogsAuditoriaService."""

    def test_logs_consentimento(self, membro_com_dados, titular_repo, consentimento_repo, auditoria_repo, uow):
        service = RegistrarConsentimentoService(titular_repo, consentimento_repo, auditoria_repo, uow)
        dto = RegistrarConsentimentoInputDTO(
            tipo_titular="membro", titular_id="m-1", consentimento=False,
            usuario_id="7", usuario_nome="Pr. Carlos", usuario_cargo="PASTOR",
        )
        service.execute(dto)

        logs = ListarLogsConsentimentoService(consentimento_repo).execute("PRESBITERO")
        assert len(logs) == 1

    def test_logs_auditoria_filtrados(self, membro_com_dados, criar_service, auditoria_repo):
        """Deve filtrar por módulo e registro."""
        criada = criar_service.execute(_criar())
        criar_service.execute(_criar(tipo="acesso"))
        service = ListarLogsAuditoriaService(auditoria_repo)

        assert len(service.execute("PASTOR", modulo="lgpd")) == 2
        assert [log.registro_id for log in service.execute("PASTOR", registro_id=criada.id)] == [criada.id]
        assert len(service.execute("PASTOR", limit=1)) == 1

    def test_logs_exigem_leitura(self, auditoria_repo, consentimento_repo):
        with pytest.raises(PermissaoNegadaError):
            ListarLogsAuditoriaService(auditoria_repo).execute("TESOUREIRO")
        with pytest.raises(PermissaoNegadaError):
            ListarLogsConsentimentoService(consentimento_repo).execute("TESOUREIRO")
