"""
Domínio LGPD - Direitos do Titular de Dados.

Este módulo contém a lógica de negócio dos direitos previstos na
LGPD para membros e visitantes da igreja:
- Entidades (Titular, SolicitacaoLGPD, VerificationToken, logs)
- Serviço de código de verificação (SMS → email)
- Use Cases (portal público, solicitações, exportação, exclusão)
- Domain Events (SolicitacaoLGPDCriada, DadosTitularExcluidos, ...)
- DTOs e Ports (interfaces para repositórios)

Características do Domínio:
- Portal público sem login: código de uso único + sessão de 30 minutos
- Respostas genéricas que não revelam a existência do titular
- Ciclo de vida da solicitação com estados terminais
- Exportação com notas pastorais redigidas
- Exclusão em cascata atômica
"""

from .entities import (
    TipoTitular,
    TipoSolicitacao,
    StatusSolicitacao,
    OrigemSolicitacao,
    CanalVerificacao,
    Cargo,
    NivelPermissao,
    Titular,
    SolicitacaoLGPD,
    VerificationToken,
    LogConsentimento,
    LogAuditoria,
    LogAcessoLGPD,
    DadosTitularExport,
    ResultadoExclusaoTitular,
)
from .events import (
    SolicitacaoLGPDCriadaEvent,
    SolicitacaoLGPDProcessadaEvent,
    DadosTitularExportadosEvent,
    DadosTitularExcluidosEvent,
    ConsentimentoAlteradoEvent,
)
from .verificacao import VerificacaoCodigoService
from .use_cases import (
    SolicitarCodigoService,
    ValidarCodigoService,
    SessaoLGPDService,
    ExportarDadosTitularService,
    ExportarDadosPortalService,
    ExportarDadosAdminService,
    ExcluirDadosTitularService,
    CriarSolicitacaoService,
    SolicitarExclusaoPortalService,
    ProcessarSolicitacaoService,
    ListarSolicitacoesService,
    ObterSolicitacaoService,
    RegistrarConsentimentoService,
    ListarLogsConsentimentoService,
    ListarLogsAuditoriaService,
)

__all__ = [
    # Entities
    "TipoTitular",
    "TipoSolicitacao",
    "StatusSolicitacao",
    "OrigemSolicitacao",
    "CanalVerificacao",
    "Cargo",
    "NivelPermissao",
    "Titular",
    "SolicitacaoLGPD",
    "VerificationToken",
    "LogConsentimento",
    "LogAuditoria",
    "LogAcessoLGPD",
    "DadosTitularExport",
    "ResultadoExclusaoTitular",
    # Events
    "SolicitacaoLGPDCriadaEvent",
    "SolicitacaoLGPDProcessadaEvent",
    "DadosTitularExportadosEvent",
    "DadosTitularExcluidosEvent",
    "ConsentimentoAlteradoEvent",
    # Services
    "VerificacaoCodigoService",
    # Use Cases
    "SolicitarCodigoService",
    "ValidarCodigoService",
    "SessaoLGPDService",
    "ExportarDadosTitularService",
    "ExportarDadosPortalService",
    "ExportarDadosAdminService",
    "ExcluirDadosTitularService",
    "CriarSolicitacaoService",
    "SolicitarExclusaoPortalService",
    "ProcessarSolicitacaoService",
    "ListarSolicitacoesService",
    "ObterSolicitacaoService",
    "RegistrarConsentimentoService",
    "ListarLogsConsentimentoService",
    "ListarLogsAuditoriaService",
]
