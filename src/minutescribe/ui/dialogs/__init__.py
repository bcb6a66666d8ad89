"""UI dialogs"""

from .login_dialog import LoginDialog
from .upload_dialog import UploadDialog
from .export_dialog import ExportDialog

__all__ = [
    "LoginDialog",
    "UploadDialog",
    "ExportDialog",
]
