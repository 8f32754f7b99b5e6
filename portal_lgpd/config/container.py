"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, canais, publisher)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: carregada dos settings LGPD_* em get_container()

Imports são feitos sob demanda (`_lazy`) para que o container possa
ser importado antes do registro das apps Django.
"""

from importlib import import_module
from typing import Optional

from dependency_injector import containers, providers


CORE_USE_CASES = 'portal_lgpd.core.lgpd.use_cases'
CORE_VERIFICACAO = 'portal_lgpd.core.lgpd.verificacao'
REPOSITORIES = 'portal_lgpd.adapters.django_app.lgpd.repositories'
CANAIS = 'portal_lgpd.adapters.django_app.lgpd.canais'
UNIT_OF_WORK = 'portal_lgpd.adapters.django_app.shared.unit_of_work'
PUBLISHERS = 'portal_lgpd.adapters.django_app.events.publishers'


def _lazy(modulo: str, nome: str):
    """Callable que importa `modulo.nome` só quando o provider é resolvido."""

    def _factory(*args, **kwargs):
        return getattr(import_module(modulo), nome)(*args, **kwargs)

    _factory.__name__ = nome
    return _factory


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings LGPD_*, Twilio, email
    - Infrastructure: publisher de eventos, canais SMS/email
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.solicitar_codigo_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _lazy(PUBLISHERS, 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    canal_sms = providers.Singleton(
        _lazy(CANAIS, 'TwilioSMSChannel'),
        account_sid=config.twilio_account_sid,
        auth_token=config.twilio_auth_token,
        from_number=config.twilio_phone_number,
        timeout=config.canal_timeout,
    )

    canal_email = providers.Singleton(
        _lazy(CANAIS, 'DjangoEmailChannel'),
        from_email=config.default_from_email,
        timeout=config.canal_timeout,
    )

    verificacao_service = providers.Singleton(
        _lazy(CORE_VERIFICACAO, 'VerificacaoCodigoService'),
        canal_sms=canal_sms,
        canal_email=canal_email,
        bcrypt_rounds=config.bcrypt_rounds,
        validade_minutos=config.codigo_expiracao_minutos,
        nome_portal=config.nome_portal,
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    titular_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoTitularRepository'))
    dados_titular_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoDadosTitularRepository'))
    solicitacao_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoSolicitacaoLGPDRepository'))
    consentimento_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoLogConsentimentoRepository'))
    auditoria_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoLogAuditoriaRepository'))
    acesso_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoLogAcessoRepository'))
    token_repository = providers.Singleton(_lazy(REPOSITORIES, 'DjangoVerificationTokenRepository'))

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy(UNIT_OF_WORK, 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services - Portal público
    # =========================================================================

    solicitar_codigo_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'SolicitarCodigoService'),
        titular_repo=titular_repository,
        token_repo=token_repository,
        acesso_repo=acesso_repository,
        verificacao_service=verificacao_service,
        uow=unit_of_work,
        max_tentativas=config.max_tentativas,
        validade_minutos=config.codigo_expiracao_minutos,
    )

    validar_codigo_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ValidarCodigoService'),
        titular_repo=titular_repository,
        token_repo=token_repository,
        acesso_repo=acesso_repository,
        uow=unit_of_work,
        max_tentativas=config.max_tentativas,
        duracao_sessao_minutos=config.sessao_expiracao_minutos,
    )

    sessao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'SessaoLGPDService'),
        token_repo=token_repository,
    )

    # =========================================================================
    # Services - Motores
    # =========================================================================

    exportacao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ExportarDadosTitularService'),
        titular_repo=titular_repository,
        dados_repo=dados_titular_repository,
        consentimento_repo=consentimento_repository,
    )

    exclusao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ExcluirDadosTitularService'),
        titular_repo=titular_repository,
        dados_repo=dados_titular_repository,
        consentimento_repo=consentimento_repository,
        uow=unit_of_work,
    )

    exportar_dados_portal_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ExportarDadosPortalService'),
        exportacao_service=exportacao_service,
        sessao_service=sessao_service,
        acesso_repo=acesso_repository,
        auditoria_repo=auditoria_repository,
        uow=unit_of_work,
    )

    solicitar_exclusao_portal_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'SolicitarExclusaoPortalService'),
        titular_repo=titular_repository,
        solicitacao_repo=solicitacao_repository,
        sessao_service=sessao_service,
        acesso_repo=acesso_repository,
        auditoria_repo=auditoria_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Administração
    # =========================================================================

    exportar_dados_admin_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ExportarDadosAdminService'),
        exportacao_service=exportacao_service,
        auditoria_repo=auditoria_repository,
        uow=unit_of_work,
    )

    criar_solicitacao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'CriarSolicitacaoService'),
        titular_repo=titular_repository,
        solicitacao_repo=solicitacao_repository,
        auditoria_repo=auditoria_repository,
        uow=unit_of_work,
    )

    processar_solicitacao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ProcessarSolicitacaoService'),
        solicitacao_repo=solicitacao_repository,
        auditoria_repo=auditoria_repository,
        exportacao_service=exportacao_service,
        exclusao_service=exclusao_service,
        uow=unit_of_work,
    )

    # Leitura (sem UoW)
    listar_solicitacoes_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ListarSolicitacoesService'),
        solicitacao_repo=solicitacao_repository,
    )

    obter_solicitacao_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ObterSolicitacaoService'),
        solicitacao_repo=solicitacao_repository,
    )

    registrar_consentimento_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'RegistrarConsentimentoService'),
        titular_repo=titular_repository,
        consentimento_repo=consentimento_repository,
        auditoria_repo=auditoria_repository,
        uow=unit_of_work,
    )

    listar_logs_consentimento_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ListarLogsConsentimentoService'),
        consentimento_repo=consentimento_repository,
    )

    listar_logs_auditoria_service = providers.Factory(
        _lazy(CORE_USE_CASES, 'ListarLogsAuditoriaService'),
        auditoria_repo=auditoria_repository,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def carregar_config(settings) -> dict:
    """Monta o dicionário de configuração do container a partir dos settings."""
    return {
        'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
        'nome_portal': getattr(settings, 'LGPD_NOME_PORTAL', 'Portal LGPD'),
        'codigo_expiracao_minutos': getattr(settings, 'LGPD_CODIGO_EXPIRACAO_MINUTOS', 10),
        'sessao_expiracao_minutos': getattr(settings, 'LGPD_SESSAO_EXPIRACAO_MINUTOS', 30),
        'max_tentativas': getattr(settings, 'LGPD_MAX_TENTATIVAS', 3),
        'bcrypt_rounds': getattr(settings, 'LGPD_BCRYPT_ROUNDS', 10),
        'canal_timeout': getattr(settings, 'LGPD_CANAL_TIMEOUT', 10),
        'twilio_account_sid': getattr(settings, 'TWILIO_ACCOUNT_SID', None),
        'twilio_auth_token': getattr(settings, 'TWILIO_AUTH_TOKEN', None),
        'twilio_phone_number': getattr(settings, 'TWILIO_PHONE_NUMBER', None),
        'default_from_email': getattr(settings, 'DEFAULT_FROM_EMAIL', None),
    }


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), carregando os settings.
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict(carregar_config(settings))

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None
