"""
Submission API endpoints - the step-by-step project submission flow

The client carries projectPath/folderName from create-project through every
later step; the server keeps no session.
"""
import uuid
from pathlib import Path

from flask import request, jsonify, current_app
from transformers.utils import logging
from werkzeug.utils import secure_filename

from project_portal.api import api_bp
from project_portal.api.projects import error_response, get_record_store
from project_portal.i18n import t
from project_portal.services.errors import (
    FolderCollisionError, MissingSubmissionFilesError, SubmissionError, SubmissionStateError,
)
from project_portal.services.folder_manager import FolderManager
from project_portal.services.submission_service import SubmissionService
from project_portal.utils.file_handler import FileHandler

logger = logging.get_logger(__name__)


def get_submission_service() -> SubmissionService:
    """Get SubmissionService instance with current app config"""
    return SubmissionService(
        record_store=get_record_store(),
        folder_manager=FolderManager(current_app.config['FOLDER_COLLISION_POLICY'])
    )


def save_temp_upload(field_name: str, upload) -> Path:
    """Store an uploaded file in the temp upload folder under a unique name"""
    upload_folder = Path(current_app.config['UPLOAD_FOLDER'])
    FileHandler.ensure_directory(upload_folder)
    ext = Path(secure_filename(upload.filename or '')).suffix
    temp_path = upload_folder / f"{field_name}-{uuid.uuid4().hex}{ext}"
    upload.save(str(temp_path))
    return temp_path


@api_bp.route('/location-preference', methods=['POST'])
def location_preference():
    """
    Resolve where submissions should be saved

    Request body:
        {"useDefault": true}

    Returns:
        The default save path, or a hint that the client must pick a folder
    """
    try:
        data = request.get_json(silent=True) or {}
        if data.get('useDefault'):
            default_path = Path(current_app.config['DEFAULT_SAVE_PATH'])
            FileHandler.ensure_directory(default_path)
            return jsonify({'success': True, 'path': str(default_path)}), 200

        return jsonify({'success': True, 'needsFolderPicker': True}), 200

    except Exception as e:
        logger.error(f"Error occurred while handling location preference: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/create-project', methods=['POST'])
def create_project():
    """
    Create the folder for a new submission

    Request body:
        {
            "projectName": "Smart Attendance",
            "savePath": "/srv/submissions"
        }

    Returns:
        JSON response with projectPath and folderName
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        project_name = data.get('projectName') or ''
        save_path = data.get('savePath') or ''

        if not isinstance(project_name, str) or not isinstance(save_path, str):
            return error_response('errors.validation_error', t('errors.invalid_text_fields'), 400)
        project_name = project_name.strip()
        save_path = save_path.strip()

        if not project_name or not save_path:
            return error_response('errors.bad_request', t('errors.project_name_and_path_required'), 400)

        info = get_submission_service().begin(project_name, save_path)

        return jsonify({
            'success': True,
            **info.to_dict(),
            'message': t('success.project_folder_created')
        }), 200

    except FolderCollisionError as e:
        return error_response('errors.conflict', t('errors.folder_exists', folder=e.folder_name), 409)
    except ValueError as e:
        return error_response('errors.validation_error', str(e), 400)
    except Exception as e:
        logger.error(f"Error occurred while creating project folder: {e}")
        return error_response('errors.internal_error', str(e), 500)


def _handle_upload(field_name: str, place):
    upload = request.files.get(field_name)
    if not upload or not upload.filename:
        return error_response('errors.bad_request', t('errors.no_file_uploaded'), 400)

    project_path = request.form.get('projectPath')
    if not project_path:
        return error_response('errors.bad_request', t('errors.project_path_required'), 400)

    temp_path = None
    try:
        temp_path = save_temp_upload(field_name, upload)
        file_ref = place(project_path, temp_path, upload.filename)

        return jsonify({
            'success': True,
            'path': file_ref.path,
            'fileName': file_ref.name,
            'fileSize': file_ref.size
        }), 200

    except SubmissionStateError as e:
        return error_response('errors.validation_error', str(e), 400)
    except ValueError as e:
        return error_response('errors.validation_error', str(e), 400)
    except Exception as e:
        logger.error(f"Error occurred while uploading {field_name} file: {e}")
        return error_response('errors.internal_error', str(e), 500)
    finally:
        # left behind only when placement failed
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()


@api_bp.route('/upload-readme', methods=['POST'])
def upload_readme():
    """
    Upload the README file

    Form data:
        readme: README file (required)
        projectPath: Submission folder from create-project (required)
    """
    return _handle_upload('readme', get_submission_service().upload_readme)


@api_bp.route('/upload-installation', methods=['POST'])
def upload_installation():
    """
    Upload installation instructions, keeping the original extension

    Form data:
        installation: Installation file (required)
        projectPath: Submission folder from create-project (required)
    """
    return _handle_upload('installation', get_submission_service().upload_installation)


@api_bp.route('/upload-source', methods=['POST'])
def upload_source():
    """
    Upload the source code archive

    Form data:
        source: Zip archive (required)
        projectPath: Submission folder from create-project (required)
    """
    return _handle_upload('source', get_submission_service().upload_source)


@api_bp.route('/complete-project', methods=['POST'])
def complete_project():
    """
    Finalize a submission and store its metadata

    Request body:
        {
            "projectName": "Smart Attendance",
            "teamMembers": [{"name": "Asha", "usn": "1XX21CS001"}],
            "projectPath": "...",
            "folderName": "..."
        }

    Returns:
        JSON response with the stored project record
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        project_name = data.get('projectName')
        team_members = data.get('teamMembers')
        project_path = data.get('projectPath')

        if not project_name or not team_members or not project_path:
            return error_response('errors.bad_request', t('errors.missing_required_fields'), 400)
        if not isinstance(team_members, list):
            return error_response('errors.validation_error', t('errors.missing_required_fields'), 400)
        folder_name = data.get('folderName')
        if (not isinstance(project_name, str) or not isinstance(project_path, str)
                or not isinstance(folder_name, (str, type(None)))):
            return error_response('errors.validation_error', t('errors.invalid_text_fields'), 400)

        record = get_submission_service().finalize(
            project_name, team_members, project_path, folder_name
        )

        return jsonify({
            'success': True,
            'projectData': record.to_dict(),
            'message': t('success.project_submitted')
        }), 200

    except MissingSubmissionFilesError as e:
        return error_response('errors.validation_error',
                              t('errors.missing_files', roles=', '.join(e.roles)), 400)
    except SubmissionStateError as e:
        return error_response('errors.validation_error', str(e), 400)
    except ValueError as e:
        return error_response('errors.validation_error', str(e), 400)
    except SubmissionError as e:
        logger.error(f"Error occurred while completing project: {e}")
        return error_response('errors.internal_error', t('errors.save_failed'), 500)
    except Exception as e:
        logger.error(f"Error occurred while completing project: {e}")
        return error_response('errors.internal_error', str(e), 500)
