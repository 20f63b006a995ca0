from django.core.management.base import BaseCommand
from rest_framework.authtoken.models import Token

from accounts.models import CustomUser, UserRole
from core.models import Company

TEST_USERS = [
    {'username': 'ops_user', 'password': 'ops_password', 'role': UserRole.OPERATIONS_MANAGER},
    {'username': 'finance_user', 'password': 'finance_password', 'role': UserRole.FINANCE_MANAGER},
    {'username': 'client_user', 'password': 'client_password', 'role': UserRole.CLIENT, 'company': True},
    {'username': 'viewer_user', 'password': 'viewer_password', 'role': UserRole.VIEWER},
]


class Command(BaseCommand):
    help = 'Create one test user per non-admin role, plus a demo client company'

    def handle(self, *args, **options):
        company, _ = Company.objects.get_or_create(
            name='Demo Client SARL', defaults={'email': 'contact@demo-client.test', 'country': 'BF'}
        )

        for user_data in TEST_USERS:
            user = CustomUser.objects.filter(username=user_data['username']).first()
            if user is not None:
                self.stdout.write(self.style.WARNING(f"User {user.username} already exists"))
            else:
                user = CustomUser(
                    username=user_data['username'],
                    email=f"{user_data['username']}@example.test",
                    role=user_data['role'],
                    company=company if user_data.get('company') else None,
                )
                user.set_password(user_data['password'])
                user.save()
                self.stdout.write(self.style.SUCCESS(f"Created {user.role} user: {user.username}"))

            token, _ = Token.objects.get_or_create(user=user)
            self.stdout.write(f"  token: {token.key}")

        self.stdout.write(self.style.SUCCESS("All test users created successfully!"))
