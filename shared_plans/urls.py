from django.urls import path
from . import views

app_name = 'shared_plans'

urlpatterns = [
    path('', views.plan_collection, name='list'),
    path('invitations/', views.received_invitations, name='received_invitations'),
    path('<int:pk>/', views.plan_detail, name='detail'),
    path('<int:pk>/invitations/', views.plan_invitations, name='invitations'),
    path('<int:pk>/members/', views.plan_members, name='members'),
    path('<int:pk>/tasks/', views.plan_tasks, name='tasks'),
    path('<int:pk>/messages/', views.plan_messages, name='messages'),
]
