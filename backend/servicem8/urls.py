from django.urls import path
from . import views

app_name = 'servicem8'

urlpatterns = [
    path('sync/', views.manual_sync_jobs, name='manual_sync_jobs'),
    path('sync/status/', views.sync_status, name='sync_status'),
    path('sync/logs/', views.list_sync_logs, name='sync_logs'),
    path('job-notes/<str:job_uuid>/', views.get_job_notes, name='job_notes'),
    path('job-activity/<str:job_uuid>/', views.get_job_activity, name='job_activity'),
    path('job-history/<str:job_uuid>/', views.get_job_history, name='job_history'),
]
