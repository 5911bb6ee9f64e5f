from sns_proxy.constants import APP_PORT, LOG_LEVEL
from sns_proxy.controller import create_app
from sns_proxy.utils import configure_logging

configure_logging(LOG_LEVEL)
app = create_app()

if __name__ == '__main__':
    # threaded: uma thread por requisição; templates e cliente SNS são compartilhados só para leitura
    app.run(host='0.0.0.0', port=APP_PORT, threaded=True)
