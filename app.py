import logging

from pipeshell import create_app, settings

app = create_app()

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.run(host=settings.HOST, port=settings.PORT)
