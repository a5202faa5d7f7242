from django import forms
from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password

from .models import UserProfile


class EmailRegistrationForm(forms.Form):
    email = forms.EmailField(required=True)
    password = forms.CharField(required=True, strip=False)
    display_name = forms.CharField(required=False, max_length=100)

    def clean_email(self):
        email = self.cleaned_data.get('email', '').strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError('An account with this e-mail already exists.')
        return email

    def clean_password(self):
        password = self.cleaned_data.get('password')
        validate_password(password)
        return password

    def save(self):
        email = self.cleaned_data['email']
        # The e-mail doubles as username for the default User model
        user = User.objects.create_user(username=email, email=email, password=self.cleaned_data['password'])
        display_name = (self.cleaned_data.get('display_name') or '').strip() or email.split('@')[0]
        UserProfile.objects.create(user=user, display_name=display_name)
        return user


class EmailAuthenticationForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)

    def __init__(self, *args, request=None, **kwargs):
        self.request = request
        self.user = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        email = cleaned.get('email')
        password = cleaned.get('password')
        if email and password:
            # Map the e-mail to the real username before authenticating
            match = User.objects.filter(email__iexact=email).first()
            username = match.username if match else email
            self.user = authenticate(self.request, username=username, password=password)
            if self.user is None:
                raise forms.ValidationError('Invalid e-mail or password.')
        return cleaned
