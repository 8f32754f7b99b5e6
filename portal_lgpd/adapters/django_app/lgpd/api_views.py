"""
API Views JSON do domínio LGPD.

Portal público (titular, sem login):
- POST /lgpd/publico/solicitar-codigo/ - Pede código de verificação
- POST /lgpd/publico/validar-codigo/ - Valida código e recebe sessão
- GET  /lgpd/publico/exportar-dados/ - Baixa os próprios dados (header X-LGPD-Session)
- POST /lgpd/publico/solicitar-exclusao/ - Pede exclusão dos próprios dados

Administração (usuário staff):
- GET/POST /lgpd/solicitacoes/ - Listar / registrar solicitações
- GET  /lgpd/solicitacoes/<id>/ - Detalhe
- POST /lgpd/solicitacoes/<id>/processar/ - Aprovar / recusar
- GET  /lgpd/titulares/<tipo>/<id>/exportar/ - Exportar dados de um titular
- POST /lgpd/titulares/<tipo>/<id>/consentimento/ - Conceder / revogar consentimento
- GET  /lgpd/logs-consentimento/
- GET  /lgpd/logs-auditoria/

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Erros do portal público são propositalmente vagos; erros da
administração carregam detalhes (campo, regra, resultado parcial).
"""

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from portal_lgpd.core.lgpd.dtos import (
    CriarSolicitacaoInputDTO,
    ExportarDadosAdminInputDTO,
    ExportarDadosPortalInputDTO,
    ProcessarSolicitacaoInputDTO,
    RegistrarConsentimentoInputDTO,
    SolicitarCodigoInputDTO,
    SolicitarExclusaoPortalInputDTO,
    ValidarCodigoInputDTO,
)
from portal_lgpd.core.lgpd.entities import Cargo
from portal_lgpd.core.shared.exceptions import (
    AuthenticationError,
    BusinessRuleViolationError,
    ChannelDeliveryError,
    ConfiguracaoCanalError,
    DomainException,
    EntityNotFoundError,
    ExclusaoFalhouError,
    PermissaoNegadaError,
    TentativasExcedidasError,
    ValidationError,
)
from portal_lgpd.config.container import get_container

from .throttling import get_client_ip, limitar_por_ip

logger = logging.getLogger(__name__)


SESSION_HEADER = "X-LGPD-Session"

CARGOS_ADMIN = (Cargo.PASTOR, Cargo.PRESBITERO, Cargo.TESOUREIRO, Cargo.DIACONO)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais

    Returns:
        JsonResponse formatada
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("Corpo da requisição deve ser um objeto JSON")
    return data


def campo_texto(data: Dict, campo: str, alternativo: str = None) -> Optional[str]:
    """
    Valor textual de um campo do body JSON (None se ausente).

    Raises:
        ValidationError: Campo presente com valor que não é string
    """
    valor = data.get(campo)
    if valor in (None, '') and alternativo:
        campo, valor = alternativo, data.get(alternativo, valor)
    if valor is None:
        return None
    if not isinstance(valor, str):
        raise ValidationError(f"Campo '{campo}' deve ser texto", field=campo)
    return valor


def get_user_agent(request: HttpRequest) -> Optional[str]:
    return request.META.get('HTTP_USER_AGENT')


def resolver_cargo(user) -> str:
    """
    Cargo LGPD do usuário a partir dos grupos do Django.

    Superusuário conta como PASTOR. Usuário sem grupo de cargo
    retorna string vazia (acesso negado pelos use cases).
    """
    if user.is_superuser:
        return Cargo.PASTOR.value

    grupos = set(user.groups.values_list('name', flat=True))
    for cargo in CARGOS_ADMIN:
        if cargo.value in grupos:
            return cargo.value
    return ''


# =============================================================================
# Base API Views
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tradução de exceções de domínio para HTTP
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container (nova instância por chamada)."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        A ordem importa: subclasses antes das classes base.
        """
        if isinstance(e, TentativasExcedidasError):
            return json_response(success=False, error=e.message, status=429,
                                 meta={'code': e.code})

        if isinstance(e, AuthenticationError):
            return json_response(success=False, error=e.message, status=401,
                                 meta={'code': e.code})

        if isinstance(e, PermissaoNegadaError):
            return json_response(success=False, error=e.message, status=403,
                                 meta={'code': e.code})

        if isinstance(e, ChannelDeliveryError):
            logger.error(f"[LGPD] Falha de entrega (canal={e.canal}): {e.message}")
            return json_response(
                success=False,
                error="Erro ao enviar código. Por favor, tente novamente mais tarde.",
                status=502,
            )

        if isinstance(e, ConfiguracaoCanalError):
            logger.error(f"[LGPD] {e}")
            return json_response(success=False, error="Erro interno do servidor", status=500)

        if isinstance(e, ValidationError):
            return json_response(success=False, error=e.message, status=400,
                                 meta={'field': e.field})

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=e.message, status=404)

        if isinstance(e, ExclusaoFalhouError):
            return json_response(
                success=False,
                error=e.message,
                status=422,
                meta={
                    'rule': e.rule,
                    'resultado': e.resultado.to_dict() if e.resultado is not None else None,
                },
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(success=False, error=e.message, status=422,
                                 meta={'rule': e.rule})

        if isinstance(e, DomainException):
            return json_response(success=False, error=e.message, status=400)

        if isinstance(e, ValueError):
            return json_response(success=False, error=str(e), status=400)

        logger.exception(f"Erro inesperado na API LGPD: {e}")
        return json_response(success=False, error="Erro interno do servidor", status=500)


@method_decorator(csrf_exempt, name='dispatch')
class AdminAPIView(BaseAPIView):
    """
    Base das rotas administrativas: exige usuário autenticado e staff.

    A permissão por cargo (leitura/total) é verificada nos use cases.
    """

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_response(success=False, error="Autenticação necessária", status=401)
        if not request.user.is_staff:
            return json_response(success=False, error="Acesso restrito à administração", status=403)
        return super().dispatch(request, *args, **kwargs)

    def usuario(self, request: HttpRequest) -> Dict[str, str]:
        user = request.user
        return {
            'id': str(user.pk),
            'nome': user.get_full_name() or user.get_username(),
            'cargo': resolver_cargo(user),
        }


def _parse_limit(request: HttpRequest) -> Optional[int]:
    valor = request.GET.get('limit')
    if not valor:
        return None
    try:
        limit = int(valor)
    except ValueError:
        raise ValidationError("limit deve ser um inteiro", field="limit")
    if limit <= 0:
        raise ValidationError("limit deve ser positivo", field="limit")
    return limit


# =============================================================================
# Portal público
# =============================================================================

@method_decorator(
    limitar_por_ip('solicitar_codigo', 'LGPD_RATE_LIMIT_SOLICITAR_CODIGO', 3),
    name='post',
)
class SolicitarCodigoAPIView(BaseAPIView):
    """
    POST /lgpd/publico/solicitar-codigo/

    Body JSON:
    {
        "nome": "string",
        "cpf": "string (com ou sem pontuação)",
        "data_nascimento": "YYYY-MM-DD",
        "telefone": "string (opcional)"
    }

    A resposta é a mesma exista ou não o titular.
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            service = self.get_service('solicitar_codigo_service')

            output = service.execute(SolicitarCodigoInputDTO(
                nome=campo_texto(data, 'nome') or '',
                cpf=campo_texto(data, 'cpf') or '',
                data_nascimento=campo_texto(data, 'data_nascimento', 'dataNascimento') or '',
                telefone=campo_texto(data, 'telefone') or None,
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            ))

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


@method_decorator(
    limitar_por_ip('validar_codigo', 'LGPD_RATE_LIMIT_VALIDAR_CODIGO', 5),
    name='post',
)
class ValidarCodigoAPIView(BaseAPIView):
    """
    POST /lgpd/publico/validar-codigo/

    Body JSON: {"codigo": "6 dígitos", "cpf": "...", "data_nascimento": "YYYY-MM-DD"}
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            service = self.get_service('validar_codigo_service')

            output = service.execute(ValidarCodigoInputDTO(
                codigo=campo_texto(data, 'codigo') or '',
                cpf=campo_texto(data, 'cpf') or '',
                data_nascimento=campo_texto(data, 'data_nascimento', 'dataNascimento') or '',
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            ))

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ExportarDadosPortalAPIView(BaseAPIView):
    """
    GET /lgpd/publico/exportar-dados/

    Header: X-LGPD-Session: <session_token>

    Retorna o pacote como anexo JSON. A sessão é consumida.
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            service = self.get_service('exportar_dados_portal_service')

            output = service.execute(ExportarDadosPortalInputDTO(
                session_token=request.headers.get(SESSION_HEADER, ''),
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            ))

            response = json_response(
                success=True,
                data=output.to_dict(),
                meta={'nome_arquivo': output.nome_arquivo},
            )
            response['Content-Disposition'] = f'attachment; filename="{output.nome_arquivo}"'
            return response

        except Exception as e:
            return self.handle_exception(e)


class SolicitarExclusaoPortalAPIView(BaseAPIView):
    """
    POST /lgpd/publico/solicitar-exclusao/

    Body JSON: {"session_token": "...", "motivo": "string (opcional)"}

    O token também é aceito no header X-LGPD-Session.
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            service = self.get_service('solicitar_exclusao_portal_service')

            output = service.execute(SolicitarExclusaoPortalInputDTO(
                session_token=campo_texto(data, 'session_token') or request.headers.get(SESSION_HEADER, ''),
                motivo=campo_texto(data, 'motivo') or None,
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            ))

            return json_response(
                success=True,
                data={
                    'message': (
                        'Solicitação de exclusão registrada. '
                        'Ela será analisada pela administração.'
                    ),
                    'solicitacao_id': output.id,
                    'status': output.status,
                },
                status=201,
            )

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Administração - Solicitações
# =============================================================================

class SolicitacaoListAPIView(AdminAPIView):
    """
    GET  /lgpd/solicitacoes/?status=&tipo=
    POST /lgpd/solicitacoes/
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            service = self.get_service('listar_solicitacoes_service')
            solicitacoes = service.execute(
                usuario_cargo=self.usuario(request)['cargo'],
                status=request.GET.get('status') or None,
                tipo=request.GET.get('tipo') or None,
            )
            return json_response(
                success=True,
                data=[s.to_dict() for s in solicitacoes],
                meta={'total': len(solicitacoes)},
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "tipo": "acesso|exportacao|exclusao",
            "tipo_titular": "membro|visitante",
            "titular_id": "string",
            "motivo": "string (opcional)"
        }
        """
        try:
            data = self.parse_body(request)
            usuario = self.usuario(request)
            service = self.get_service('criar_solicitacao_service')

            output = service.execute(CriarSolicitacaoInputDTO(
                tipo=campo_texto(data, 'tipo') or '',
                tipo_titular=campo_texto(data, 'tipo_titular') or '',
                titular_id=campo_texto(data, 'titular_id') or '',
                motivo=campo_texto(data, 'motivo') or None,
                usuario_id=usuario['id'],
                usuario_nome=usuario['nome'],
                usuario_cargo=usuario['cargo'],
                ip_address=get_client_ip(request),
            ))

            logger.info(f"API: Solicitação LGPD criada: {output.id}")
            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class SolicitacaoDetailAPIView(AdminAPIView):
    """GET /lgpd/solicitacoes/<id>/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            service = self.get_service('obter_solicitacao_service')
            output = service.execute(pk, usuario_cargo=self.usuario(request)['cargo'])
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ProcessarSolicitacaoAPIView(AdminAPIView):
    """
    POST /lgpd/solicitacoes/<id>/processar/

    Body JSON:
    {
        "status": "concluida|recusada|em_andamento",
        "justificativa_recusa": "string (obrigatório para recusada)"
    }
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            usuario = self.usuario(request)
            service = self.get_service('processar_solicitacao_service')

            output = service.execute(ProcessarSolicitacaoInputDTO(
                solicitacao_id=pk,
                status=campo_texto(data, 'status') or '',
                responsavel_id=usuario['id'],
                responsavel_nome=usuario['nome'],
                responsavel_cargo=usuario['cargo'],
                justificativa_recusa=campo_texto(data, 'justificativa_recusa') or None,
                ip_address=get_client_ip(request),
            ))

            logger.info(f"API: Solicitação {pk} processada → {output.solicitacao.status}")
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Administração - Titulares
# =============================================================================

class ExportarDadosAdminAPIView(AdminAPIView):
    """GET /lgpd/titulares/<tipo>/<id>/exportar/"""

    def get(self, request: HttpRequest, tipo: str, titular_id: str) -> JsonResponse:
        try:
            usuario = self.usuario(request)
            service = self.get_service('exportar_dados_admin_service')

            output = service.execute(ExportarDadosAdminInputDTO(
                tipo_titular=tipo,
                titular_id=titular_id,
                usuario_id=usuario['id'],
                usuario_nome=usuario['nome'],
                usuario_cargo=usuario['cargo'],
                ip_address=get_client_ip(request),
            ))

            response = json_response(
                success=True,
                data=output.to_dict(),
                meta={'nome_arquivo': output.nome_arquivo},
            )
            response['Content-Disposition'] = f'attachment; filename="{output.nome_arquivo}"'
            return response

        except Exception as e:
            return self.handle_exception(e)


class ConsentimentoAPIView(AdminAPIView):
    """
    POST /lgpd/titulares/<tipo>/<id>/consentimento/

    Body JSON: {"consentimento": true|false}
    """

    def post(self, request: HttpRequest, tipo: str, titular_id: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            if not isinstance(data.get('consentimento'), bool):
                raise ValidationError("consentimento deve ser true ou false", field="consentimento")

            usuario = self.usuario(request)
            service = self.get_service('registrar_consentimento_service')

            log = service.execute(RegistrarConsentimentoInputDTO(
                tipo_titular=tipo,
                titular_id=titular_id,
                consentimento=data['consentimento'],
                usuario_id=usuario['id'],
                usuario_nome=usuario['nome'],
                usuario_cargo=usuario['cargo'],
                ip_address=get_client_ip(request),
            ))

            return json_response(success=True, data=log.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Administração - Logs
# =============================================================================

class LogsConsentimentoAPIView(AdminAPIView):
    """GET /lgpd/logs-consentimento/?limit="""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            service = self.get_service('listar_logs_consentimento_service')
            logs = service.execute(
                usuario_cargo=self.usuario(request)['cargo'],
                limit=_parse_limit(request),
            )
            return json_response(
                success=True,
                data=[log.to_dict() for log in logs],
                meta={'total': len(logs)},
            )

        except Exception as e:
            return self.handle_exception(e)


class LogsAuditoriaAPIView(AdminAPIView):
    """GET /lgpd/logs-auditoria/?modulo=&registro_id=&limit="""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            service = self.get_service('listar_logs_auditoria_service')
            logs = service.execute(
                usuario_cargo=self.usuario(request)['cargo'],
                modulo=request.GET.get('modulo') or None,
                registro_id=request.GET.get('registro_id') or None,
                limit=_parse_limit(request),
            )
            return json_response(
                success=True,
                data=[log.to_dict() for log in logs],
                meta={'total': len(logs)},
            )

        except Exception as e:
            return self.handle_exception(e)
