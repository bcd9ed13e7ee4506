from tenancy.presentation.tenant_admin.routes import router

__all__ = ["router"]
