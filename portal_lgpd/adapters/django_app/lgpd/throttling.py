"""
Rate limiting por IP para as rotas públicas.

Contadores no cache do Django (janela fixa). O limite é lido dos
settings a cada request, então `override_settings` funciona nos testes.

Uso:
    @method_decorator(limitar_por_ip("solicitar_codigo", "LGPD_RATE_LIMIT_SOLICITAR_CODIGO"),
                      name="post")
    class SolicitarCodigoAPIView(BaseAPIView): ...
"""

from functools import wraps
import logging

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, JsonResponse

logger = logging.getLogger(__name__)


MENSAGEM_LIMITE = "Muitas tentativas. Por favor, aguarde antes de tentar novamente."


def get_client_ip(request: HttpRequest) -> str:
    """IP informado pelo cliente (primeiro salto de X-Forwarded-For). Só para logs."""
    encaminhado = request.META.get("HTTP_X_FORWARDED_FOR")
    if encaminhado:
        return encaminhado.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "") or "desconhecido"


def get_ip_limite(request: HttpRequest) -> str:
    """
    IP usado como chave do rate limit.

    Sem proxies confiáveis configurados, usa REMOTE_ADDR. Com N proxies
    (LGPD_PROXIES_CONFIAVEIS), usa o N-ésimo salto a partir da direita de
    X-Forwarded-For, que foi adicionado pelo proxy e não pelo cliente.
    """
    remoto = request.META.get("REMOTE_ADDR", "") or "desconhecido"
    proxies = getattr(settings, "LGPD_PROXIES_CONFIAVEIS", 0)
    if proxies <= 0:
        return remoto

    saltos = [s.strip() for s in request.META.get("HTTP_X_FORWARDED_FOR", "").split(",") if s.strip()]
    if len(saltos) < proxies:
        return remoto
    return saltos[-proxies]


def _registrar_hit(chave: str, janela: int) -> int:
    """Incrementa o contador da janela e retorna o total atual."""
    if cache.add(chave, 1, timeout=janela):
        return 1
    try:
        return cache.incr(chave)
    except ValueError:
        # chave expirou entre o add e o incr
        cache.set(chave, 1, timeout=janela)
        return 1


def limitar_por_ip(escopo: str, setting_limite: str, limite_padrao: int = 3):
    """
    Decorator de view: no máximo N requests por IP por janela.

    Args:
        escopo: Prefixo da chave no cache (ex: "solicitar_codigo")
        setting_limite: Nome do setting com o limite por janela
        limite_padrao: Limite se o setting não existir

    Returns:
        Decorator que responde 429 quando o limite é excedido
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request: HttpRequest, *args, **kwargs):
            limite = getattr(settings, setting_limite, limite_padrao)
            janela = getattr(settings, "LGPD_RATE_LIMIT_JANELA_SEGUNDOS", 3600)
            ip = get_ip_limite(request)

            total = _registrar_hit(f"lgpd:rl:{escopo}:{ip}", janela)
            if total > limite:
                logger.warning(f"[RATE_LIMIT] {escopo} excedido para {ip} ({total}/{limite})")
                return JsonResponse(
                    {"success": False, "error": MENSAGEM_LIMITE},
                    status=429,
                )
            return view_func(request, *args, **kwargs)

        return _wrapped

    return decorator
