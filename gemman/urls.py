"""
Gemman API URLs.

    path('api/catalog/', include('gemman.urls'))
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from gemman.views import SyncViewSet, UnitViewSet

app_name = 'gemman'

router = SimpleRouter()
router.register(r'units', UnitViewSet, basename='unit')
router.register(r'sync', SyncViewSet, basename='sync')

urlpatterns = [
    path('', include(router.urls)),
]
