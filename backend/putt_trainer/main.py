from flask import Blueprint, jsonify
import time

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the putting trainer server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'timestamp': int(time.time() * 1000)})
