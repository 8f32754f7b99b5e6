"""
URL Configuration do Portal LGPD.

Estrutura:
- /admin/ - Django Admin
- /lgpd/ - Portal público e API administrativa LGPD
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('lgpd/', include('portal_lgpd.adapters.django_app.lgpd.urls')),
    path('health/', health, name='health'),
]
