import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import chat.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Chatroom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("is_group", models.BooleanField(db_index=True, default=False, help_text="Whether this is a group chatroom")),
                ("name", models.CharField(blank=True, default="", help_text="Group name (empty for direct chatrooms)", max_length=50)),
                ("description", models.CharField(blank=True, default="", help_text="Group description (empty for direct chatrooms)", max_length=200)),
                ("image", models.CharField(blank=True, help_text="URL of the group image", max_length=500, null=True)),
                ("last_activity", models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text="Timestamp of the most recent membership or metadata change")),
                ("creator", models.ForeignKey(blank=True, help_text="User who created this group", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_chatrooms", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "chat_chatroom",
                "ordering": ["-last_activity", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("role", models.CharField(choices=[("owner", "Owner"), ("admin", "Admin"), ("member", "Member")], db_index=True, default="member", help_text="Role in the chatroom", max_length=10)),
                ("last_seen", models.DateTimeField(default=chat.models.epoch, help_text="Last time the member read the chatroom (for unread counts)")),
                ("chatroom", models.ForeignKey(help_text="Chatroom this membership belongs to", on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="chat.chatroom")),
                ("user", models.ForeignKey(blank=True, help_text="Member (null once the account was deleted)", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="chat_memberships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "chat_membership",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["user", "chatroom"], name="chat_member_user_room_idx")],
                "constraints": [models.UniqueConstraint(fields=("chatroom", "user"), name="unique_chatroom_membership")],
            },
        ),
        migrations.AddField(
            model_name="chatroom",
            name="members",
            field=models.ManyToManyField(blank=True, related_name="chatrooms", through="chat.Membership", to=settings.AUTH_USER_MODEL),
        ),
        migrations.AddConstraint(
            model_name="chatroom",
            constraint=models.UniqueConstraint(condition=models.Q(("is_group", True)), fields=("name",), name="unique_group_name"),
        ),
        migrations.CreateModel(
            name="DirectChatPair",
            fields=[
                ("chatroom", models.OneToOneField(help_text="The direct chatroom this pair represents", on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name="direct_pair", serialize=False, to="chat.chatroom")),
                ("user_higher", models.ForeignKey(help_text="User with higher id in this pair", on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user_lower", models.ForeignKey(help_text="User with lower id in this pair", on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "chat_direct_pair",
                "constraints": [
                    models.UniqueConstraint(fields=("user_lower", "user_higher"), name="unique_direct_chat_pair"),
                    models.CheckConstraint(condition=models.Q(("user_lower__lt", models.F("user_higher"))), name="direct_pair_canonical_order"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("content", models.TextField(help_text="Message text or storage URL")),
                ("message_type", models.CharField(choices=[("text", "Text"), ("image", "Image"), ("audio", "Audio"), ("system", "System")], default="text", help_text="Type of message content", max_length=10)),
                ("is_system_message", models.BooleanField(default=False, help_text="Whether this message was generated by a group mutation")),
                ("edited_at", models.DateTimeField(blank=True, help_text="When the content was last edited (null if never edited)", null=True)),
                ("edit_seen_by_owner", models.BooleanField(default=False, help_text="Direct chat: sender has seen the latest edit")),
                ("edit_seen_by_partner", models.BooleanField(default=False, help_text="Direct chat: partner has seen the latest edit")),
                ("chatroom", models.ForeignKey(help_text="Chatroom containing this message", on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="chat.chatroom")),
                ("sender", models.ForeignKey(blank=True, help_text="User who sent this message", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="chat_messages", to=settings.AUTH_USER_MODEL)),
                ("edit_seen_by", models.ManyToManyField(blank=True, help_text="Group members who have seen the latest edit", related_name="seen_message_edits", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["chatroom", "created_at"], name="chat_msg_room_created_idx")],
            },
        ),
    ]
