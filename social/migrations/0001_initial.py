import django.db.models.deletion
import django.utils.timezone
import social.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(help_text='Login e-mail address', max_length=254, unique=True)),
                ('name', models.CharField(help_text='Display name', max_length=100)),
                ('img_url', models.URLField(blank=True, default='', help_text='Avatar image URL', max_length=500)),
                ('designation', models.CharField(blank=True, default='', help_text='Short profile headline', max_length=120)),
                ('account_type', models.CharField(choices=[('PUBLIC', 'Public'), ('PRIVATE', 'Private')], default='PUBLIC', help_text='PRIVATE accounts approve followers', max_length=7)),
                ('is_verified', models.BooleanField(default=False, help_text='E-mail ownership confirmed')),
                ('verification_token', models.CharField(blank=True, help_text='Sign-up one-time password', max_length=6, null=True)),
                ('verification_token_time', models.DateTimeField(blank=True, help_text='Sign-up one-time password expiry', null=True)),
                ('forgot_verification_token', models.CharField(blank=True, help_text='Password reset one-time password', max_length=6, null=True)),
                ('forgot_verification_token_time', models.DateTimeField(blank=True, help_text='Password reset one-time password expiry', null=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', social.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Community',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Community name', max_length=100)),
                ('description', models.TextField(help_text='Community description')),
                ('img_url', models.URLField(help_text='Community avatar URL', max_length=500)),
                ('banner_url', models.URLField(blank=True, default='', help_text='Community banner URL', max_length=500)),
                ('community_type', models.CharField(choices=[('PUBLIC', 'Public'), ('PRIVATE', 'Private')], default='PUBLIC', help_text='PRIVATE communities approve members', max_length=7)),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Creation timestamp')),
                ('owner', models.ForeignKey(help_text='Community owner', on_delete=django.db.models.deletion.CASCADE, related_name='owned_communities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'communities',
            },
        ),
        migrations.CreateModel(
            name='Post',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(help_text='Post title', max_length=300)),
                ('body', models.TextField(help_text='Post text content')),
                ('img_urls', models.JSONField(blank=True, default=list, help_text='Attached image URLs')),
                ('is_deleted', models.BooleanField(default=False, help_text='Soft-delete flag')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='Creation timestamp')),
                ('community', models.ForeignKey(blank=True, help_text='Community the post belongs to (empty for personal posts)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='posts', to='social.community')),
                ('user', models.ForeignKey(help_text='Author of this post', on_delete=django.db.models.deletion.CASCADE, related_name='posts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content', models.TextField(help_text='Comment text content')),
                ('is_deleted', models.BooleanField(default=False, help_text='Soft-delete flag')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Creation timestamp')),
                ('parent', models.ForeignKey(blank=True, help_text='Parent comment for replies', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='replies', to='social.comment')),
                ('post', models.ForeignKey(help_text='Post being commented on', on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='social.post')),
                ('user', models.ForeignKey(help_text='Comment author', on_delete=django.db.models.deletion.CASCADE, related_name='comments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Deletion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Deletion timestamp')),
                ('comment', models.ForeignKey(blank=True, help_text='Deleted comment', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='deletions', to='social.comment')),
                ('post', models.ForeignKey(blank=True, help_text='Deleted post', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='deletions', to='social.post')),
                ('user', models.ForeignKey(help_text='User who deleted the content', on_delete=django.db.models.deletion.CASCADE, related_name='deletions', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Engagement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('LIKE', 'Like'), ('DISLIKE', 'Dislike')], help_text='LIKE or DISLIKE', max_length=7)),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Reaction timestamp')),
                ('comment', models.ForeignKey(blank=True, help_text='Comment reacted to, if any', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='engagements', to='social.comment')),
                ('post', models.ForeignKey(help_text='Post reacted to (or the post of the comment)', on_delete=django.db.models.deletion.CASCADE, related_name='engagements', to='social.post')),
                ('user', models.ForeignKey(help_text='User who reacted', on_delete=django.db.models.deletion.CASCADE, related_name='engagements', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('comment__isnull', True)), fields=('user', 'post'), name='unique_post_engagement'),
                    models.UniqueConstraint(condition=models.Q(('comment__isnull', False)), fields=('user', 'comment'), name='unique_comment_engagement'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('FOLLOW_REQUEST', 'Follow request'), ('FOLLOWED', 'Followed'), ('JOIN_REQUEST_COMMUNITY', 'Join request'), ('JOINED_COMMUNITY', 'Joined community'), ('LIKE_POST', 'Liked post'), ('COMMENT_POST', 'Commented on post'), ('PROFILE_VIEW', 'Viewed profile'), ('REPORT', 'Reported')], help_text='Event type', max_length=32)),
                ('status', models.CharField(choices=[('UNREAD', 'Unread'), ('READ', 'Read')], default='UNREAD', help_text='Read status', max_length=6)),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Notification creation timestamp')),
                ('comment', models.ForeignKey(blank=True, help_text='Associated comment (if applicable)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='social.comment')),
                ('community', models.ForeignKey(blank=True, help_text='Associated community (if applicable)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='social.community')),
                ('post', models.ForeignKey(blank=True, help_text='Associated post (if applicable)', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='social.post')),
                ('receiver', models.ForeignKey(help_text='User receiving this notification', on_delete=django.db.models.deletion.CASCADE, related_name='notifications_received', to=settings.AUTH_USER_MODEL)),
                ('sender', models.ForeignKey(blank=True, help_text='User who performed the action', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications_sent', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Report',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reason', models.TextField(help_text='Why the content was reported')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Report timestamp')),
                ('comment', models.ForeignKey(blank=True, help_text='Reported comment', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='reports', to='social.comment')),
                ('post', models.ForeignKey(blank=True, help_text='Reported post', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='reports', to='social.post')),
                ('reporter', models.ForeignKey(blank=True, help_text='User who filed the report', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reports_filed', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(help_text='Reported user', on_delete=django.db.models.deletion.CASCADE, related_name='reports_received', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('jti', models.CharField(help_text='Token identifier', max_length=64, unique=True)),
                ('token', models.TextField(help_text='Signed session token')),
                ('device_id', models.CharField(help_text='Random device identifier', max_length=64)),
                ('user_agent', models.CharField(blank=True, default='', help_text='Browser user agent', max_length=512)),
                ('ip_address', models.CharField(blank=True, default='', help_text='Client address at login', max_length=64)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Login timestamp')),
                ('expires_at', models.DateTimeField(help_text='Expiry timestamp')),
                ('user', models.OneToOneField(help_text='Session owner', on_delete=django.db.models.deletion.CASCADE, related_name='api_session', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Follow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Follow timestamp')),
                ('follower', models.ForeignKey(help_text='User who is following', on_delete=django.db.models.deletion.CASCADE, related_name='following', to=settings.AUTH_USER_MODEL)),
                ('following', models.ForeignKey(help_text='User being followed', on_delete=django.db.models.deletion.CASCADE, related_name='followers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('follower', 'following')},
            },
        ),
        migrations.CreateModel(
            name='CommunityMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_active', models.DateTimeField(blank=True, help_text='Last time the member posted in the community', null=True)),
                ('joined_at', models.DateTimeField(auto_now_add=True, help_text='Join timestamp')),
                ('community', models.ForeignKey(help_text='Community joined', on_delete=django.db.models.deletion.CASCADE, related_name='members', to='social.community')),
                ('user', models.ForeignKey(help_text='Member', on_delete=django.db.models.deletion.CASCADE, related_name='community_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('user', 'community')},
            },
        ),
    ]
