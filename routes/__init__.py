from flask import current_app


def lifecycle():
    return current_app.extensions["lifecycle"]
