import logging
import os
import uuid

from dotenv import load_dotenv

# load .env before anything reads the environment
BASE_DIR = os.path.dirname(__file__)
load_dotenv(dotenv_path=os.path.join(BASE_DIR, '.env'))

from flask import Flask, current_app, g, jsonify, request
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from werkzeug.utils import secure_filename

from ai_providers.registry import build_provider
from models import Base
from services import quizzer, summarizer, validation
from services.errors import LearningError, Unauthenticated, ValidationFailed
from services.generation import GenerationOrchestrator
from services.store import Store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RUNTIME_DIR = os.path.join(BASE_DIR, 'runtime')
ALLOWED_EXTENSIONS = {'.pdf': 'application/pdf', '.txt': 'text/plain'}


def _success(data=None, message: str = '', status: int = 200):
    body = {}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def _error(message: str, status: int = 400, errors: dict = None):
    body = {'message': message}
    if errors is not None:
        body['errors'] = errors
    return jsonify(body), status


def _store() -> Store:
    if 'store' not in g:
        g.store = Store(current_app.extensions['db_session']())
    return g.store


def _orchestrator() -> GenerationOrchestrator:
    return current_app.extensions['orchestrator']


def _user_id() -> int:
    """Authenticated user id, as set by the auth layer in front of this service."""
    raw = request.headers.get('X-User-Id', '')
    # ASCII digits only; str.isdigit also accepts superscripts that int() rejects
    if not (raw.isascii() and raw.isdigit()) or int(raw) < 1:
        raise Unauthenticated()
    return int(raw)



def create_app(config: dict = None) -> Flask:
    config = config or {}
    app = Flask(__name__)
    app.secret_key = config.get('SECRET_KEY', os.getenv('SECRET_KEY', 'dev'))

    upload_dir = config.get('UPLOAD_DIR') or os.getenv('UPLOAD_DIR') or os.path.join(RUNTIME_DIR, 'uploads')
    os.makedirs(upload_dir, exist_ok=True)
    app.config['UPLOAD_DIR'] = upload_dir

    database_url = config.get('DATABASE_URL') or os.getenv('DATABASE_URL')
    if not database_url:
        os.makedirs(RUNTIME_DIR, exist_ok=True)
        database_url = f"sqlite:///{os.path.join(RUNTIME_DIR, 'doclearn.db')}"
    engine = create_engine(database_url, future=True)
    Base.metadata.create_all(engine)

    provider = config.get('AI_PROVIDER_INSTANCE') or build_provider(config.get('AI_PROVIDER'))
    app.extensions['db_session'] = scoped_session(sessionmaker(bind=engine))
    app.extensions['orchestrator'] = GenerationOrchestrator(provider)

    @app.teardown_appcontext
    def _remove_session(exc=None):
        app.extensions['db_session'].remove()

    @app.errorhandler(LearningError)
    def _learning_error(e: LearningError):
        if e.status_code >= 500:
            logger.error('%s: %s', e.__class__.__name__, e.detail or e.message)
        return _error(e.message, e.status_code, getattr(e, 'errors', None))

    _register_routes(app)
    return app


def _register_routes(app: Flask):

    @app.get('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    # ============== DOCUMENTS ==============

    @app.post('/api/documents')
    def upload_document():
        user_id = _user_id()
        file = request.files.get('file')
        if not file or not file.filename:
            raise ValidationFailed({'file': ['A PDF or TXT file is required']})

        original = file.filename
        ext = os.path.splitext(original)[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationFailed({'file': ['The file must be a PDF or TXT document']})

        fname = f"{uuid.uuid4().hex}_{secure_filename(original) or 'document' + ext}"
        path = os.path.join(current_app.config['UPLOAD_DIR'], fname)
        file.save(path)

        doc = _store().create_document(
            user_id=user_id,
            filename=fname,
            original_filename=original,
            file_path=path,
            file_size=os.path.getsize(path),
            mime_type=ALLOWED_EXTENSIONS[ext],
            status='completed',
        )
        return _success({'document': _document_dict(doc)}, 'Document uploaded successfully', 201)

    @app.get('/api/documents/<int:doc_id>')
    def show_document(doc_id):
        doc = _store().get_document(doc_id, _user_id())
        return _success({'document': _document_dict(doc)})

    # ============== SUMMARIES ==============

    @app.post('/api/summaries/generate')
    def generate_summary():
        user_id = _user_id()
        req = validation.summary_request(request.get_json(silent=True))
        sm = summarizer.generate(_store(), _orchestrator(), user_id, req.document_id,
                                 req.summary_type, req.language)
        return _success({'summary': summarizer.to_dict(sm)}, 'Summary generated successfully', 201)

    @app.get('/api/summaries/<int:summary_id>')
    def show_summary(summary_id):
        sm = summarizer.view(_store(), summary_id, _user_id())
        return _success({'summary': summarizer.to_dict(sm)})

    @app.delete('/api/summaries/<int:summary_id>')
    def delete_summary(summary_id):
        _store().delete_summary(summary_id, _user_id())
        return _success(message='Summary deleted successfully')

    # ============== QUIZ ==============

    @app.post('/api/quizzes/generate')
    def generate_quiz():
        user_id = _user_id()
        req = validation.quiz_request(request.get_json(silent=True))
        quiz = quizzer.generate(_store(), _orchestrator(), user_id, req.document_id,
                                req.question_count, req.difficulty, req.question_type,
                                req.language)
        return _success({'quiz': quizzer.quiz_to_dict(quiz)}, 'Quiz generated successfully', 201)

    @app.get('/api/quizzes/<int:quiz_id>')
    def show_quiz(quiz_id):
        store = _store()
        quiz = store.get_quiz(quiz_id, _user_id())
        return _success({'quiz': quizzer.quiz_to_dict(quiz, store.quiz_stats(quiz))})

    @app.delete('/api/quizzes/<int:quiz_id>')
    def delete_quiz(quiz_id):
        _store().delete_quiz(quiz_id, _user_id())
        return _success(message='Quiz deleted successfully')

    @app.post('/api/quizzes/<int:quiz_id>/start')
    def start_attempt(quiz_id):
        attempt = quizzer.start_attempt(_store(), _user_id(), quiz_id)
        return _success({
            'attempt_id': attempt.id,
            'quiz_id': attempt.quiz_id,
            'started_at': attempt.started_at.isoformat(),
            'expires_at': attempt.expires_at.isoformat(),
        }, 'Quiz attempt started')

    @app.post('/api/quizzes/<int:quiz_id>/submit')
    def submit_attempt(quiz_id):
        user_id = _user_id()
        req = validation.submit_request(request.get_json(silent=True))
        quiz, attempt, result = quizzer.submit_attempt(
            _store(), user_id, quiz_id, req.attempt_id,
            [a.model_dump() for a in req.answers], req.time_spent_seconds,
        )
        return _success({
            'quiz_attempt': quizzer.attempt_to_dict(attempt),
            'answers': result.answers_as_dicts(),
            'quiz': {
                'id': quiz.id,
                'document_id': quiz.document_id,
                'difficulty': quiz.difficulty,
                'question_count': quiz.question_count,
            },
        }, 'Quiz submitted successfully')

    @app.get('/api/quizzes/<int:quiz_id>/attempts/<int:attempt_id>')
    def show_attempt(quiz_id, attempt_id):
        attempt = _store().get_attempt(attempt_id, _user_id(), quiz_id=quiz_id)
        return _success({
            'quiz_attempt': quizzer.attempt_to_dict(attempt),
            'answers': attempt.answers,
            'quiz': {
                'id': attempt.quiz.id,
                'document_name': attempt.quiz.document.original_filename,
                'difficulty': attempt.quiz.difficulty,
            },
        })

    @app.get('/api/quizzes/<int:quiz_id>/attempts')
    def list_attempts(quiz_id):
        user_id = _user_id()
        store = _store()
        quiz = store.get_quiz(quiz_id, user_id)
        attempts = store.list_attempts(quiz.id, user_id)
        return _success({
            'quiz': {
                'id': quiz.id,
                'document_name': quiz.document.original_filename,
                'difficulty': quiz.difficulty,
                'question_count': quiz.question_count,
            },
            'attempts': [quizzer.attempt_to_dict(a) for a in attempts],
        })


def _document_dict(doc) -> dict:
    return {
        'id': doc.id,
        'original_filename': doc.original_filename,
        'file_size': doc.file_size,
        'mime_type': doc.mime_type,
        'status': doc.status,
        'created_at': doc.created_at.isoformat() if doc.created_at else None,
    }


if __name__ == '__main__':
    create_app().run(debug=True)
