"""
WSGI entry point — used by gunicorn in Procfile.
"""
from sievebox import create_app

app = create_app()

if __name__ == '__main__':
    from sievebox.config import PORT
    app.run(host='0.0.0.0', port=PORT)
