"""
Testes do Motor de Exclusão (cascata).

Coverage:
- Ordem e contagem da cascata
- Ações diaconais preservadas
- cascade=False
- Falha (inclusive tipo inválido): resultado com sucesso=False, contadores parciais, nunca lança
- Evento entregue à transação externa quando aninhado
- Evento DadosTitularExcluidos apenas em sucesso
"""

from unittest.mock import MagicMock

import pytest

from portal_lgpd.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from portal_lgpd.core.lgpd.entities import LogConsentimento, TipoTitular
from portal_lgpd.core.lgpd.events import DadosTitularExcluidosEvent
from portal_lgpd.core.lgpd.use_cases import ExcluirDadosTitularService


@pytest.fixture
def exclusao_service(titular_repo, dados_repo, consentimento_repo, uow, relogio):
    return ExcluirDadosTitularService(titular_repo, dados_repo, consentimento_repo, uow, relogio=relogio)


class TestExcluirDadosTitular:
    """Testes para ExcluirDadosTitularService."""

    def test_cascata_completa(self, membro_com_dados, exclusao_service, titular_repo, dados_repo, consentimento_repo):
        """Deve remover dependentes e, por último, o registro principal."""
        consentimento_repo.add(LogConsentimento.registrar(membro_com_dados, consentimento_novo=False))

        resultado = exclusao_service.execute("membro", "m-1", motivo="Pedido do titular", solicitacao_id="s-1")

        assert resultado.sucesso
        assert resultado.erro is None
        assert resultado.registros_excluidos.dados_principais is True
        assert resultado.registros_excluidos.notas_pastorais == 2
        assert resultado.registros_excluidos.transacoes == 2
        assert resultado.registros_excluidos.logs_consentimento == 1
        assert resultado.motivo == "Pedido do titular"
        assert resultado.solicitacao_id == "s-1"

        assert titular_repo.get(TipoTitular.MEMBRO, "m-1") is None
        assert [n.id for n in dados_repo.notas] == ["n-3"]
        assert [t["id"] for t in dados_repo.transacoes] == ["t-3"]
        assert consentimento_repo.logs == []

    def test_acoes_diaconais_preservadas(self, membro_com_dados, exclusao_service, dados_repo):
        """Deve manter ações diaconais (prestação de contas)."""
        exclusao_service.execute("membro", "m-1")
        assert len(dados_repo.acoes_diaconais) == 2

    def test_sem_cascata(self, membro_com_dados, exclusao_service, dados_repo):
        """Deve remover apenas o registro principal com cascade=False."""
        resultado = exclusao_service.execute("membro", "m-1", cascade=False)

        assert resultado.sucesso
        assert resultado.registros_excluidos.total_dependentes == 0
        assert len(dados_repo.notas) == 3

    def test_publica_evento(self, membro_com_dados, exclusao_service, uow):
        """Deve publicar DadosTitularExcluidos após commit."""
        exclusao_service.execute("membro", "m-1", solicitacao_id="s-1")

        evento = uow.published_events[-1]
        assert isinstance(evento, DadosTitularExcluidosEvent)
        assert evento.aggregate_id == "m-1"
        assert evento.titular_email == "maria@exemplo.com"
        assert evento.registros_excluidos["notas_pastorais"] == 2

    def test_titular_inexistente_retorna_falha(self, exclusao_service, uow):
        """Deve retornar sucesso=False em vez de lançar."""
        resultado = exclusao_service.execute("visitante", "nao-existe")

        assert resultado.sucesso is False
        assert "não encontrado" in resultado.erro
        assert uow.published_events == []

    def test_falha_no_registro_principal(self, membro_com_dados, exclusao_service, titular_repo, uow):
        """Deve reportar contadores parciais quando o último passo falha."""
        titular_repo.delete = MagicMock(side_effect=RuntimeError("constraint violada"))

        resultado = exclusao_service.execute("membro", "m-1")

        assert resultado.sucesso is False
        assert resultado.erro == "constraint violada"
        assert resultado.registros_excluidos.dados_principais is False
        assert resultado.registros_excluidos.notas_pastorais == 2
        assert resultado.registros_excluidos.transacoes == 2
        assert resultado.revertido is False
        assert uow.rolled_back
        assert uow.published_events == []

    def test_registro_principal_nao_removido(self, membro_com_dados, exclusao_service, titular_repo):
        """Deve tratar delete sem efeito como falha."""
        titular_repo.delete = MagicMock(return_value=False)

        resultado = exclusao_service.execute("membro", "m-1")

        assert resultado.sucesso is False
        assert resultado.registros_excluidos.dados_principais is False

    def test_resultado_serializavel(self, membro_com_dados, exclusao_service):
        """Deve expor o relatório em to_dict."""
        data = exclusao_service.execute("membro", "m-1").to_dict()

        assert data["sucesso"] is True
        assert data["tipo_titular"] == "membro"
        assert data["data_exclusao"] == "2024-03-01T12:00:00+00:00"
        assert data["registros_excluidos"]["transacoes"] == 2

    @pytest.mark.parametrize("tipo", ["fornecedor", "", None, 3])
    def test_tipo_invalido_retorna_falha(self, membro_com_dados, exclusao_service, titular_repo, dados_repo, uow, tipo):
        """Deve devolver sucesso=False sem lançar nem escrever nada."""
        resultado = exclusao_service.execute(tipo, "m-1")

        assert resultado.sucesso is False
        assert "inválido" in resultado.erro
        assert resultado.tipo_titular == tipo
        assert resultado.to_dict()["tipo_titular"] == tipo
        assert titular_repo.get(TipoTitular.MEMBRO, "m-1") is not None
        assert len(dados_repo.notas) == 3
        assert uow.published_events == []

    def test_evento_publicado_na_transacao_externa(
        self, membro_com_dados, titular_repo, dados_repo, consentimento_repo, relogio,
    ):
        """Deve entregar o evento ao UoW do chamador, não ao próprio."""
        proprio, externo = InMemoryUnitOfWork(), InMemoryUnitOfWork()
        service = ExcluirDadosTitularService(titular_repo, dados_repo, consentimento_repo, proprio, relogio=relogio)

        with externo:
            resultado = service.execute("membro", "m-1", transacao_externa=externo)
            assert externo.published_events == []

        assert resultado.sucesso
        assert proprio.published_events == []
        assert isinstance(externo.published_events[0], DadosTitularExcluidosEvent)
