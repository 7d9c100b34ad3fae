import io
import json
import os
import sys
import pytest

# Ensure the backend root (containing the `wordgames` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wordgames import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    UPLOAD_FOLDER = None
    LEADERBOARD_LIMIT = 50
    USER_RESULTS_LIMIT = 10
    CORS_ORIGINS = ['http://localhost:5173']


WORDIT_QUESTIONS = [
    {'sentence': 'The capital of France is ___.', 'options': ['Paris', 'Lyon', 'Nice'],
     'correct_answer': 'Paris', 'explanation': 'Paris has been the capital since 508.'},
    {'sentence': 'Water boils at ___ degrees Celsius.', 'options': ['90', '100'],
     'correct_answer': '100'},
]

SENTENCE_QUESTIONS = [
    {'left_clause': 'I wanted to go for a walk', 'right_clause': 'it was raining',
     'conjunctions': ['but', 'and', 'so', 'or'], 'explanation': "Use 'but' to show contrast."},
    {'left_clause': 'She studied hard', 'right_clause': 'she passed the test',
     'conjunctions': ['and', 'but', 'so', 'or'], 'correct_answer': 'so'},
]


@pytest.fixture()
def wordit_questions():
    return json.loads(json.dumps(WORDIT_QUESTIONS))


@pytest.fixture()
def sentence_questions():
    return json.loads(json.dumps(SENTENCE_QUESTIONS))


@pytest.fixture()
def flask_app(tmp_path):
    application = create_app(TestConfig)
    application.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    with application.app_context():
        # Ensure models are imported so tables are created
        import wordgames.models  # noqa: F401
        from wordgames.services.games.repository import ensure_templates
        db.create_all()
        ensure_templates()
    # Requests get their own app context so the logged in user never leaks
    # from one test client to the next through `g`.
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def make_user(flask_app):
    from wordgames.models import User

    def _make(username, role='USER', password='password'):
        with flask_app.app_context():
            user = User(username=username, role=role)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture()
def login_as(flask_app, make_user):
    """Return a test client logged in as a freshly created user."""
    def _login(username, role='USER'):
        make_user(username, role=role)
        c = flask_app.test_client()
        res = c.post('/login', json={'username': username, 'password': 'password'})
        assert res.status_code == 200
        return c
    return _login


@pytest.fixture()
def author(login_as):
    return login_as('author')


@pytest.fixture()
def thumbnail():
    def _thumbnail(name='thumb.png'):
        return (io.BytesIO(b'\x89PNG\r\n\x1a\nfake-image'), name)
    return _thumbnail


@pytest.fixture()
def create_game(thumbnail):
    """Create a game through the API and return its JSON payload."""
    def _create(c, slug, title, questions=None, is_published=False, expect=201):
        form = {'title': title, 'description': f'{title} description',
                'is_published': 'true' if is_published else 'false',
                'thumbnail': thumbnail()}
        if questions is not None:
            form['questions'] = json.dumps(questions)
        res = c.post(f'/api/game/game-type/{slug}', data=form, content_type='multipart/form-data')
        assert res.status_code == expect, res.get_json()
        return res.get_json().get('data')
    return _create
