# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/             <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py            <- Este archivo
#   ├── pyproject.toml
#   └── vruksha_admin/     <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── views/
#
# Variables de entorno principales:
#   VRUKSHA_API_BASE_URL   URL base del backend (por defecto http://localhost:5000/api)
#   VRUKSHA_SECRET_KEY     Clave para firmar la cookie de sesión
#   VRUKSHA_PRODUCTION=1   Cookies seguras
# ==============================================================================

from vruksha_admin.main import app

if __name__ == '__main__':
    # The backend usually owns port 5000
    app.run(debug=True, host='0.0.0.0', port=5001)
