from dotenv import load_dotenv
load_dotenv()

from forge import create_app

app = create_app()

if __name__ == '__main__':
    # Auto-reload and tracebacks only when FLASK_ENV=development
    import os
    app.run(debug=os.environ.get('FLASK_ENV') == 'development', host='0.0.0.0', port=5001)
