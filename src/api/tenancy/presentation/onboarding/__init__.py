from tenancy.presentation.onboarding.routes import router

__all__ = ["router"]
