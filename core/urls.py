"""
URL configuration for core project.

The contact form is reachable at /contact/submit and, for static pages that
still post to the legacy script path, at /contact.php.
"""
from django.urls import path, include

from contact.views import ContactFormSubmitView

urlpatterns = [
    path('contact/', include('contact.urls')),
    path('contact.php', ContactFormSubmitView.as_view(), name='contact-legacy-submit'),
]
