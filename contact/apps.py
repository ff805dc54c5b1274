from django.apps import AppConfig
from django.conf import settings


class ContactConfig(AppConfig):
    name = 'contact'
    verbose_name = 'Contact Form'

    def ready(self):
        """Build the immutable contact form configuration once per process."""
        from .config import ContactFormConfig

        self.form_config = ContactFormConfig.from_settings(settings)
