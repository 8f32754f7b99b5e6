"""
URL patterns do domínio LGPD (montadas em /lgpd/).

Portal público:
- POST /lgpd/publico/solicitar-codigo/
- POST /lgpd/publico/validar-codigo/
- GET  /lgpd/publico/exportar-dados/
- POST /lgpd/publico/solicitar-exclusao/

Administração:
- GET/POST /lgpd/solicitacoes/
- GET  /lgpd/solicitacoes/<id>/
- POST /lgpd/solicitacoes/<id>/processar/
- GET  /lgpd/titulares/<tipo>/<id>/exportar/
- POST /lgpd/titulares/<tipo>/<id>/consentimento/
- GET  /lgpd/logs-consentimento/
- GET  /lgpd/logs-auditoria/
"""

from django.urls import path

from . import api_views

app_name = 'lgpd'

urlpatterns = [
    # =========================================================================
    # Portal público
    # =========================================================================

    path('publico/solicitar-codigo/', api_views.SolicitarCodigoAPIView.as_view(),
         name='solicitar_codigo'),
    path('publico/validar-codigo/', api_views.ValidarCodigoAPIView.as_view(),
         name='validar_codigo'),
    path('publico/exportar-dados/', api_views.ExportarDadosPortalAPIView.as_view(),
         name='exportar_dados'),
    path('publico/solicitar-exclusao/', api_views.SolicitarExclusaoPortalAPIView.as_view(),
         name='solicitar_exclusao'),

    # =========================================================================
    # Administração
    # =========================================================================

    # Solicitações
    path('solicitacoes/', api_views.SolicitacaoListAPIView.as_view(), name='solicitacoes'),
    path('solicitacoes/<str:pk>/', api_views.SolicitacaoDetailAPIView.as_view(),
         name='solicitacao_detail'),
    path('solicitacoes/<str:pk>/processar/', api_views.ProcessarSolicitacaoAPIView.as_view(),
         name='processar_solicitacao'),

    # Titulares
    path('titulares/<str:tipo>/<str:titular_id>/exportar/',
         api_views.ExportarDadosAdminAPIView.as_view(), name='exportar_titular'),
    path('titulares/<str:tipo>/<str:titular_id>/consentimento/',
         api_views.ConsentimentoAPIView.as_view(), name='consentimento'),

    # Logs
    path('logs-consentimento/', api_views.LogsConsentimentoAPIView.as_view(),
         name='logs_consentimento'),
    path('logs-auditoria/', api_views.LogsAuditoriaAPIView.as_view(), name='logs_auditoria'),
]
