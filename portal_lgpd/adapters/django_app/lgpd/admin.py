"""
Django Admin do domínio LGPD.

Solicitações são consultadas aqui; o processamento passa pela API
(ProcessarSolicitacaoService), para que exportação, exclusão e
auditoria aconteçam juntas. Logs e tokens são somente leitura.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    LogAcessoLGPDModel,
    LogAuditoriaModel,
    LogConsentimentoModel,
    SolicitacaoLGPDModel,
    VerificationTokenModel,
)


BADGE_HTML = (
    '<span style="background-color: {}; color: white; padding: 3px 8px; '
    'border-radius: 3px; font-size: 11px;">{}</span>'
)


class SomenteLeituraAdmin(admin.ModelAdmin):
    """Registros append-only: sem inclusão, edição ou remoção pelo admin."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SolicitacaoLGPDModel)
class SolicitacaoLGPDAdmin(SomenteLeituraAdmin):

    list_display = [
        'id_curto',
        'tipo',
        'status_badge',
        'titular_nome',
        'tipo_titular',
        'origem',
        'responsavel_id',
        'criado_em',
    ]

    list_filter = [
        'status',
        'tipo',
        'origem',
        'tipo_titular',
        'criado_em',
    ]

    search_fields = [
        'id',
        'titular_id',
        'titular_nome',
        'titular_email',
    ]

    readonly_fields = [
        'id',
        'criado_em',
        'data_atendimento',
    ]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def id_curto(self, obj):
        return obj.id[:8] + '...'
    id_curto.short_description = 'ID'

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        colors = {
            'pendente': '#ffc107',
            'em_andamento': '#17a2b8',
            'concluida': '#28a745',
            'recusada': '#dc3545',
        }
        return format_html(
            BADGE_HTML,
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'


@admin.register(LogConsentimentoModel)
class LogConsentimentoAdmin(SomenteLeituraAdmin):

    list_display = ['titular_nome', 'tipo_titular', 'acao', 'usuario_id', 'criado_em']
    list_filter = ['acao', 'tipo_titular', 'criado_em']
    search_fields = ['titular_id', 'titular_nome', 'usuario_id']


@admin.register(LogAuditoriaModel)
class LogAuditoriaAdmin(SomenteLeituraAdmin):

    list_display = ['modulo', 'acao', 'usuario_nome', 'usuario_cargo', 'registro_id', 'criado_em']
    list_filter = ['modulo', 'acao', 'usuario_cargo', 'criado_em']
    search_fields = ['descricao', 'registro_id', 'usuario_id', 'usuario_nome']


@admin.register(LogAcessoLGPDModel)
class LogAcessoLGPDAdmin(SomenteLeituraAdmin):

    list_display = ['titular_nome', 'acao', 'sucesso_badge', 'canal_verificacao', 'ip_address', 'criado_em']
    list_filter = ['acao', 'sucesso', 'canal_verificacao', 'criado_em']
    search_fields = ['titular_id', 'titular_nome', 'ip_address']

    def sucesso_badge(self, obj):
        if obj.sucesso:
            return format_html(BADGE_HTML, '#28a745', 'OK')
        return format_html(BADGE_HTML, '#dc3545', obj.motivo_falha or 'Falha')
    sucesso_badge.short_description = 'Resultado'


@admin.register(VerificationTokenModel)
class VerificationTokenAdmin(SomenteLeituraAdmin):
    """Hash do código e token de sessão não são exibidos."""

    list_display = ['titular_id', 'tipo_titular', 'canal', 'tentativas_validacao',
                    'validado', 'revogado', 'expires_at', 'criado_em']
    list_filter = ['canal', 'validado', 'revogado']
    search_fields = ['titular_id']
    exclude = ['hashed_codigo', 'session_token']
