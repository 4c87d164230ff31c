from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/auth/', include('authx.urls')),
    path('api/core/', include('core.urls')),
    path('api/events/', include('events.urls')),
    path('api/tasks/', include('tasks.urls')),
    path('api/finances/', include('finances.urls')),
    path('api/transport/', include('transport.urls')),
    path('api/messaging/', include('messaging.urls')),
    path('api/competitions/', include('competitions.urls')),
    path('api/ux/', include('ux.urls')),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
