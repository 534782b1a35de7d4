from django.apps import AppConfig

class ChoirdinatedConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'choirdinated'

    def ready(self):
        # Implicitly connect signal handlers decorated with @receiver.
        import choirdinated.signals.fileSignals
        import choirdinated.signals.loginSignals
        import choirdinated.signals.profileSignals
