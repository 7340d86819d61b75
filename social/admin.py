from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.utils.html import format_html
from django.urls import reverse
from .models import (
    User, Session, Follow, Community, CommunityMember, Post,
    Comment, Engagement, Notification, Report, Deletion
)

# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('email', 'name', 'account_type', 'is_verified', 'is_staff', 'date_joined')
    list_filter = ('account_type', 'is_verified', 'is_staff')
    search_fields = ('email', 'name')
    ordering = ('email',)
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('name', 'img_url', 'designation', 'account_type', 'is_verified')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {'classes': ('wide',), 'fields': ('email', 'name', 'password1', 'password2')}),
    )
    actions = ['verify_users', 'deactivate_users']

    def verify_users(self, request, queryset):
        queryset.update(is_verified=True)
        self.message_user(request, f"{queryset.count()} users verified")
    verify_users.short_description = "Mark selected users verified"

    def deactivate_users(self, request, queryset):
        queryset.update(is_active=False)
        self.message_user(request, f"{queryset.count()} users deactivated")
    deactivate_users.short_description = "Deactivate selected users"

@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'ip_address', 'created_at', 'expires_at')
    search_fields = ('user__email', 'ip_address')

@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('id', 'user_link', 'title', 'community', 'created_at', 'is_deleted')
    list_filter = ('is_deleted', 'created_at')
    search_fields = ('title', 'body', 'user__email')

    def user_link(self, obj):
        url = reverse("admin:social_user_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.name)
    user_link.short_description = 'User'
    user_link.admin_order_field = 'user__name'

@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'created_at', 'content_short', 'is_deleted')
    list_filter = ('is_deleted',)
    search_fields = ('content', 'user__email', 'post__id')

    def content_short(self, obj):
        return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
    content_short.short_description = 'Content'

@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'owner', 'community_type', 'created_at', 'member_count')
    list_filter = ('community_type',)
    search_fields = ('name', 'owner__email')

    def member_count(self, obj):
        return obj.members.count()
    member_count.short_description = 'Members'

@admin.register(CommunityMember)
class CommunityMemberAdmin(admin.ModelAdmin):
    list_display = ('id', 'community', 'user', 'joined_at', 'last_active')
    search_fields = ('community__name', 'user__email')

@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('id', 'follower', 'following', 'created_at')
    search_fields = ('follower__email', 'following__email')

@admin.register(Engagement)
class EngagementAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'type', 'post', 'comment', 'created_at')
    list_filter = ('type',)

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'receiver', 'sender', 'type', 'status', 'created_at')
    list_filter = ('type', 'status')
    search_fields = ('receiver__email', 'sender__email')

@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'reporter', 'post', 'comment', 'created_at')
    search_fields = ('reason', 'user__email')

@admin.register(Deletion)
class DeletionAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'comment', 'created_at')

# Unregister Django's default Group
admin.site.unregister(Group)

# Basic admin site configuration
admin.site.site_header = "DrifNet Admin"
admin.site.site_title = "DrifNet Admin Portal"
admin.site.index_title = "Welcome"
