"""
Projects API endpoints - browsing, searching and downloading stored submissions
"""
from pathlib import Path

from flask import request, jsonify, current_app, send_file
from transformers.utils import logging

from project_portal.api import api_bp
from project_portal.i18n import t
from project_portal.models.project import ROLE_STUDENT_INFO, FileRef
from project_portal.services.record_store import RecordStore
from project_portal.services.submission_service import STUDENT_INFO_FILE
from project_portal.utils.file_handler import FileHandler

logger = logging.get_logger(__name__)


def get_record_store() -> RecordStore:
    """Get the RecordStore bound to the current app"""
    return current_app.extensions['record_store']


def error_response(error_key: str, message: str, status: int):
    return jsonify({
        'success': False,
        'error': t(error_key),
        'message': message
    }), status


@api_bp.route('/projects', methods=['GET'])
def list_projects():
    """
    List all stored projects

    Returns:
        JSON response with list of projects
    """
    try:
        projects = get_record_store().read_all()
        return jsonify({
            'success': True,
            'projects': [p.to_dict() for p in projects],
            'count': len(projects)
        }), 200

    except Exception as e:
        logger.error(f"Error occurred while listing projects: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/search', methods=['GET'])
def search_projects():
    """
    Search projects

    Query parameters:
        query: Text to look for (empty returns everything)
        type: projectName | memberName | usn | timestamp | all

    Returns:
        JSON response with matching projects
    """
    try:
        query = request.args.get('query', '')
        scope = request.args.get('type', 'all')
        projects = get_record_store().search(query, scope)
        return jsonify({
            'success': True,
            'projects': [p.to_dict() for p in projects],
            'count': len(projects)
        }), 200

    except Exception as e:
        logger.error(f"Error occurred while searching projects: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/project/<project_id>', methods=['GET'])
def get_project(project_id):
    """
    Get project by ID

    Args:
        project_id: Project identifier

    Returns:
        JSON response with project data
    """
    try:
        project = get_record_store().get_by_id(project_id)
        if not project:
            return error_response('errors.not_found', t('errors.project_not_found'), 404)

        return jsonify({'success': True, 'project': project.to_dict()}), 200

    except Exception as e:
        logger.error(f"Error occurred while retrieving project: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/project/<project_id>', methods=['DELETE'])
def delete_project(project_id):
    """
    Delete a project record

    The submission folder on disk is left untouched.
    """
    try:
        store = get_record_store()
        if not store.get_by_id(project_id):
            return error_response('errors.not_found', t('errors.project_not_found'), 404)

        result = store.delete(project_id)
        if not result:
            return error_response('errors.internal_error', result.error or '', 500)

        return jsonify({
            'success': True,
            'message': t('success.project_deleted'),
            'project_id': project_id
        }), 200

    except Exception as e:
        logger.error(f"Error occurred while deleting project: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/download/<project_id>/<file_type>', methods=['GET'])
def download_file(project_id, file_type):
    """
    Download one file of a submission

    Args:
        project_id: Project identifier
        file_type: readme | installation | source | studentInfo

    Returns:
        File attachment or error
    """
    try:
        project = get_record_store().get_by_id(project_id)
        if not project:
            return error_response('errors.not_found', t('errors.project_not_found'), 404)

        file_ref = project.files.get(file_type)

        # Records written before student info was tracked
        if file_type == ROLE_STUDENT_INFO and not file_ref and project.project_path:
            legacy_path = Path(project.project_path) / STUDENT_INFO_FILE
            if legacy_path.exists():
                file_ref = FileRef(name=STUDENT_INFO_FILE, path=str(legacy_path))

        if not file_ref or not file_ref.path:
            return error_response('errors.not_found', t('errors.file_not_found'), 404)

        file_path = Path(file_ref.path)
        if not file_path.is_file():
            return error_response('errors.not_found', t('errors.file_not_found_on_disk'), 404)

        return send_file(file_path.resolve(), as_attachment=True,
                         download_name=file_ref.name or file_path.name)

    except Exception as e:
        logger.error(f"Error occurred while downloading file: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/download-project/<project_id>', methods=['GET'])
def download_project(project_id):
    """
    Download the whole submission folder as a zip archive

    Args:
        project_id: Project identifier

    Returns:
        Zip attachment named after the submission folder
    """
    try:
        project = get_record_store().get_by_id(project_id)
        if not project:
            return error_response('errors.not_found', t('errors.project_not_found'), 404)

        project_path = Path(project.project_path) if project.project_path else None
        if not project_path or not project_path.is_dir():
            return error_response('errors.not_found', t('errors.project_folder_not_found'), 404)

        folder_name = project.folder_name or project_path.name
        archive = FileHandler.zip_directory(project_path, folder_name)
        return send_file(archive, mimetype='application/zip', as_attachment=True,
                         download_name=f"{folder_name}.zip")

    except Exception as e:
        logger.error(f"Error occurred while downloading project: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/stats', methods=['GET'])
def get_stats():
    """Database statistics"""
    try:
        return jsonify({'success': True, 'stats': get_record_store().stats()}), 200

    except Exception as e:
        logger.error(f"Error occurred while reading stats: {e}")
        return error_response('errors.internal_error', str(e), 500)


@api_bp.route('/compact-database', methods=['POST'])
def compact_database():
    """Remove duplicate records and repair malformed ones"""
    try:
        result = get_record_store().compact()
        return jsonify({
            'success': result.success,
            'message': t('success.database_compacted') if result else t('success.database_compact_failed')
        }), 200

    except Exception as e:
        logger.error(f"Error occurred while compacting database: {e}")
        return error_response('errors.internal_error', str(e), 500)
