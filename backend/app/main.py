from flask import Blueprint, jsonify
from app import parties

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the party card game server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'parties': len(parties)})
