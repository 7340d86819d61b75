"""
================================================================================
DRIFNET - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models defining the complete database schema
@version     1.0.0

MODULE PURPOSE
================================================================================
This module defines all database models for the DrifNet platform:
- User model (extended from AbstractUser, e-mail login)
- API sessions (one signed-token session per user)
- Social graph edges (Follow, CommunityMember)
- Communities, posts and one-level comment threads
- Engagements (like/dislike on posts and comments)
- Notifications driving the inbox and request workflows
- Moderation reports and soft-delete markers

DATABASE STRUCTURE
================================================================================
1. User & Authentication
   - User (AbstractUser extension, account visibility)
   - Session (signed cookie session, unique per user)

2. Social Graph
   - Follow (follower -> following)
   - Community
   - CommunityMember (user <-> community)

3. Content
   - Post (personal or community post, soft-deletable)
   - Comment (post comments with one level of replies)
   - Engagement (LIKE / DISLIKE)

4. Notifications & Moderation
   - Notification (typed event: follow, join, like, comment, report...)
   - Report (moderation report against a user's content)
   - Deletion (soft-delete marker row)

MODEL RELATIONSHIPS
================================================================================
User (1) ──────> (1) Session
User (1) ──────> (N) Post
User (1) ──────> (N) Comment
User (1) ──────> (N) Community (owner)
User (N) <─────> (N) User (Follow)
User (N) <─────> (N) Community (CommunityMember)

Post (1) ──────> (N) Comment
Comment (1) ────> (N) Comment (replies, one level)
Post / Comment (1) ──> (N) Engagement, Report, Deletion

VISIBILITY
================================================================================
Accounts and communities are PUBLIC or PRIVATE. Following a PUBLIC account
or joining a PUBLIC community creates the edge at once; a PRIVATE target
gets a *_REQUEST notification instead and the edge only appears when the
request is accepted.

SOFT DELETE
================================================================================
Posts and comments are never purged. Deleting sets is_deleted and writes a
Deletion row recording who deleted it and when.

================================================================================
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.db.models import Q
from django.utils import timezone


# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

class Visibility(models.TextChoices):
    PUBLIC = 'PUBLIC', 'Public'
    PRIVATE = 'PRIVATE', 'Private'


class EngagementType(models.TextChoices):
    LIKE = 'LIKE', 'Like'
    DISLIKE = 'DISLIKE', 'Dislike'


class NotificationType(models.TextChoices):
    FOLLOW_REQUEST = 'FOLLOW_REQUEST', 'Follow request'
    FOLLOWED = 'FOLLOWED', 'Followed'
    JOIN_REQUEST_COMMUNITY = 'JOIN_REQUEST_COMMUNITY', 'Join request'
    JOINED_COMMUNITY = 'JOINED_COMMUNITY', 'Joined community'
    LIKE_POST = 'LIKE_POST', 'Liked post'
    COMMENT_POST = 'COMMENT_POST', 'Commented on post'
    PROFILE_VIEW = 'PROFILE_VIEW', 'Viewed profile'
    REPORT = 'REPORT', 'Reported'


class NotificationStatus(models.TextChoices):
    UNREAD = 'UNREAD', 'Unread'
    READ = 'READ', 'Read'


# ============================================================================
# SECTION 1: USER & AUTHENTICATION MODELS
# ============================================================================

class UserManager(BaseUserManager):
    """Manager for the e-mail based user model."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The email must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_verified', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Extended User model with social network features.

    Users log in with their e-mail address. Accounts must be verified with a
    one-time password before password login is allowed; GitHub sign-in marks
    the account verified directly.

    Attributes:
        email (EmailField): Login identifier, stored lower-case
        name (CharField): Display name
        img_url (URLField): Avatar URL (object storage)
        designation (CharField): Short headline shown on the profile
        account_type (CharField): PUBLIC or PRIVATE
        is_verified (BooleanField): E-mail ownership confirmed
        verification_token (CharField): Sign-up OTP
        verification_token_time (DateTimeField): Sign-up OTP expiry
        forgot_verification_token (CharField): Password reset OTP
        forgot_verification_token_time (DateTimeField): Password reset OTP expiry

    Related Names:
        posts, comments, engagements: user's content
        following: Follow objects (users this user follows)
        followers: Follow objects (users following this user)
        community_memberships: CommunityMember objects
        notifications_sent / notifications_received: Notification objects
    """

    username = None
    email = models.EmailField(
        unique=True,
        help_text="Login e-mail address"
    )

    # --- Profile Information ---
    name = models.CharField(
        max_length=100,
        help_text="Display name"
    )
    img_url = models.URLField(
        max_length=500,
        blank=True,
        default='',
        help_text="Avatar image URL"
    )
    designation = models.CharField(
        max_length=120,
        blank=True,
        default='',
        help_text="Short profile headline"
    )

    # --- Privacy Flags ---
    account_type = models.CharField(
        max_length=7,
        choices=Visibility.choices,
        default=Visibility.PUBLIC,
        help_text="PRIVATE accounts approve followers"
    )

    # --- Verification ---
    is_verified = models.BooleanField(
        default=False,
        help_text="E-mail ownership confirmed"
    )
    verification_token = models.CharField(
        max_length=6,
        null=True,
        blank=True,
        help_text="Sign-up one-time password"
    )
    verification_token_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Sign-up one-time password expiry"
    )
    forgot_verification_token = models.CharField(
        max_length=6,
        null=True,
        blank=True,
        help_text="Password reset one-time password"
    )
    forgot_verification_token_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Password reset one-time password expiry"
    )

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    def __str__(self):
        return self.name or self.email


class Session(models.Model):
    """
    Signed-token login session.

    The cookie carries an HS256 token whose ``jti`` must match this row. A
    user holds at most one session: logging in again replaces it.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='api_session',
        help_text="Session owner"
    )
    jti = models.CharField(
        max_length=64,
        unique=True,
        help_text="Token identifier"
    )
    token = models.TextField(
        help_text="Signed session token"
    )
    device_id = models.CharField(
        max_length=64,
        help_text="Random device identifier"
    )
    user_agent = models.CharField(
        max_length=512,
        blank=True,
        default='',
        help_text="Browser user agent"
    )
    ip_address = models.CharField(
        max_length=64,
        blank=True,
        default='',
        help_text="Client address at login"
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        help_text="Login timestamp"
    )
    expires_at = models.DateTimeField(
        help_text="Expiry timestamp"
    )

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()

    def __str__(self):
        return f"Session of {self.user} until {self.expires_at:%Y-%m-%d}"


# ============================================================================
# SECTION 2: SOCIAL GRAPH MODELS
# ============================================================================

class Follow(models.Model):
    """
    Follower-following relationship between users.

    Represents a one-way follow connection.
    User A can follow User B without B following back.

    Example:
        Follow.objects.create(follower=user_a, following=user_b)
    """

    follower = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='following',
        help_text="User who is following"
    )
    following = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='followers',
        help_text="User being followed"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Follow timestamp"
    )

    class Meta:
        unique_together = ('follower', 'following')

    def __str__(self):
        return f"{self.follower} -> {self.following}"


class Community(models.Model):
    """
    A user-owned community.

    PRIVATE communities route join attempts through the owner as
    JOIN_REQUEST_COMMUNITY notifications.
    """

    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_communities',
        help_text="Community owner"
    )
    name = models.CharField(
        max_length=100,
        help_text="Community name"
    )
    description = models.TextField(
        help_text="Community description"
    )
    img_url = models.URLField(
        max_length=500,
        help_text="Community avatar URL"
    )
    banner_url = models.URLField(
        max_length=500,
        blank=True,
        default='',
        help_text="Community banner URL"
    )
    community_type = models.CharField(
        max_length=7,
        choices=Visibility.choices,
        default=Visibility.PUBLIC,
        help_text="PRIVATE communities approve members"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Creation timestamp"
    )

    class Meta:
        verbose_name_plural = 'communities'

    def __str__(self):
        return self.name


class CommunityMember(models.Model):
    """
    Membership of a user in a community.

    last_active is refreshed whenever the member posts in the community and
    feeds the activity boost of the top-communities ranking.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='community_memberships',
        help_text="Member"
    )
    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        related_name='members',
        help_text="Community joined"
    )
    last_active = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the member posted in the community"
    )
    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Join timestamp"
    )

    class Meta:
        unique_together = ('user', 'community')

    def __str__(self):
        return f"{self.user} in {self.community}"


# ============================================================================
# SECTION 3: CONTENT MODELS
# ============================================================================

class Post(models.Model):
    """
    User-generated post, personal or inside a community.

    Meta:
        ordering: Newest first (descending created_at)
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text="Author of this post"
    )
    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='posts',
        help_text="Community the post belongs to (empty for personal posts)"
    )
    title = models.CharField(
        max_length=300,
        help_text="Post title"
    )
    body = models.TextField(
        help_text="Post text content"
    )
    img_urls = models.JSONField(
        default=list,
        blank=True,
        help_text="Attached image URLs"
    )
    is_deleted = models.BooleanField(
        default=False,
        help_text="Soft-delete flag"
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Creation timestamp"
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.title[:50]}"


class Comment(models.Model):
    """
    Comment on a post with one level of replies.

    A reply's parent must itself be a root comment.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Comment author"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Post being commented on"
    )
    parent = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='replies',
        help_text="Parent comment for replies"
    )
    content = models.TextField(
        help_text="Comment text content"
    )
    is_deleted = models.BooleanField(
        default=False,
        help_text="Soft-delete flag"
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        help_text="Creation timestamp"
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user}: {self.content[:50]}"


class Engagement(models.Model):
    """
    Like or dislike from a user on a post, or on a comment of that post.

    Exactly one row per (user, post) for post engagements and per
    (user, comment) for comment engagements.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='engagements',
        help_text="User who reacted"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='engagements',
        help_text="Post reacted to (or the post of the comment)"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='engagements',
        help_text="Comment reacted to, if any"
    )
    type = models.CharField(
        max_length=7,
        choices=EngagementType.choices,
        help_text="LIKE or DISLIKE"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Reaction timestamp"
    )

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'post'],
                condition=Q(comment__isnull=True),
                name='unique_post_engagement',
            ),
            models.UniqueConstraint(
                fields=['user', 'comment'],
                condition=Q(comment__isnull=False),
                name='unique_comment_engagement',
            ),
        ]


# ============================================================================
# SECTION 4: NOTIFICATION & MODERATION MODELS
# ============================================================================

class Notification(models.Model):
    """
    Typed, directed event record.

    Drives the inbox and the follow/join request workflows. Request
    notifications are deleted when accepted or rejected; any notification
    is deleted once read. A copy is pushed to the realtime channel when it
    is created (see social.notifications).

    Attributes:
        type (CharField): NotificationType value
        sender (ForeignKey): Acting user (empty for system reports)
        receiver (ForeignKey): User receiving the notification
        status (CharField): UNREAD or READ
        post / comment / community (ForeignKey): Subject of the event
    """

    type = models.CharField(
        max_length=32,
        choices=NotificationType.choices,
        help_text="Event type"
    )
    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications_sent',
        help_text="User who performed the action"
    )
    receiver = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications_received',
        help_text="User receiving this notification"
    )
    status = models.CharField(
        max_length=6,
        choices=NotificationStatus.choices,
        default=NotificationStatus.UNREAD,
        help_text="Read status"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
        help_text="Associated post (if applicable)"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
        help_text="Associated comment (if applicable)"
    )
    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
        help_text="Associated community (if applicable)"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Notification creation timestamp"
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} for {self.receiver}"


class Report(models.Model):
    """Moderation report filed against a user's post or comment."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reports_received',
        help_text="Reported user"
    )
    reporter = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports_filed',
        help_text="User who filed the report"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reports',
        help_text="Reported post"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reports',
        help_text="Reported comment"
    )
    reason = models.TextField(
        help_text="Why the content was reported"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Report timestamp"
    )


class Deletion(models.Model):
    """Soft-delete marker for a post or comment."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='deletions',
        help_text="User who deleted the content"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='deletions',
        help_text="Deleted post"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='deletions',
        help_text="Deleted comment"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Deletion timestamp"
    )
