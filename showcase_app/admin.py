from django.contrib import admin
from showcase_app.models import WebsiteConnection


@admin.register(WebsiteConnection)
class WebsiteConnectionAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'user', 'is_active', 'is_featured', 'created_date')
    list_filter = ('is_active', 'is_featured')
    search_fields = ('title', 'link', 'user__username')
