"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import UserFactory

    # Verified user with a generated username
    user = UserFactory()

    # Unverified user
    user = UserFactory(is_verified=False)
"""

import factory

from authentication.models import User


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    By default, users are verified and active so they can log in and chat.

    Examples:
        user = UserFactory(username="alice")
        user = UserFactory(avatar="/media/avatars/a.png")
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"user{n}")
    is_verified = True
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"),
            username=kwargs.pop("username"),
            password=password,
            **kwargs,
        )
