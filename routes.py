import logging
from flask import render_template, request, redirect, url_for, flash, jsonify, session, send_from_directory
from flask_login import login_user, logout_user, login_required, current_user
from werkzeug.exceptions import RequestEntityTooLarge

from models import AdminUser
from storage import StorageError
from uploads import UploadError, TOO_LARGE_MESSAGE
from utils import APPLICATION_FIELDS, validate_application_form

logger = logging.getLogger(__name__)

RESUME_REQUIRED_MESSAGE = 'Resume is required and must be PDF/DOC/DOCX within size limits'


def register_routes(app, job_store, application_store, uploads, mail_log, notifier):
    settings = app.config['SETTINGS']

    # Public pages
    @app.route('/')
    def home():
        return render_template('home.html', jobs=job_store.list_jobs())

    @app.route('/about')
    def about():
        return render_template('about.html')

    @app.route('/contact')
    def contact():
        return render_template('contact.html')

    @app.route('/jobs')
    def jobs():
        return render_template('jobs.html', jobs=job_store.list_jobs())

    @app.route('/jobs/<job_id>/apply', methods=['GET'])
    def apply_form(job_id):
        job = job_store.get_job(job_id)
        if not job:
            return 'Job not found', 404
        return render_template('apply.html', job=job, error=None, form={})

    @app.route('/jobs/<job_id>/apply', methods=['POST'])
    def apply_submit(job_id):
        job = job_store.get_job(job_id)
        if not job:
            return 'Job not found', 404

        def form_error(message, form, saved_path=None):
            uploads.discard(saved_path)
            return render_template('apply.html', job=job, error=message, form=form)

        try:
            form = {name: request.form.get(name, '') for name in APPLICATION_FIELDS}
            upload = request.files.get('resume')
        except RequestEntityTooLarge:
            logger.info(f"Application request for job {job_id} exceeded the size limit")
            return form_error(TOO_LARGE_MESSAGE, {})

        try:
            saved_path = uploads.save(upload)
        except UploadError as e:
            return form_error(str(e), form)

        error = validate_application_form(form)
        if error:
            return form_error(error, form, saved_path)

        if not saved_path:
            return form_error(RESUME_REQUIRED_MESSAGE, form)

        try:
            uploads.enforce_min_size(saved_path)
        except UploadError as e:
            return form_error(str(e), form, saved_path)

        application = application_store.create_application(job, form, uploads.reference(saved_path))
        notifier.send_confirmation(application, job)

        return render_template('apply_success.html', job=job, application=application)

    @app.route('/uploads/<path:filename>')
    def uploaded_resume(filename):
        return send_from_directory(settings.upload_dir, filename)

    @app.route('/api/jobs', methods=['GET'])
    def api_jobs():
        """Public JSON feed of current openings"""
        jobs_data = [job.to_dict() for job in job_store.list_jobs()]
        return jsonify({
            'success': True,
            'jobs': jobs_data,
            'count': len(jobs_data)
        })

    # Admin session
    @app.route('/admin', methods=['GET', 'POST'])
    def admin():
        if not current_user.is_authenticated:
            return render_template('admin_login.html', error=None)

        job_list = job_store.list_jobs()
        return render_template('admin.html',
                               jobs=job_list,
                               job_titles={str(job.id): job.title for job in job_list},
                               applications=application_store.list_applications(),
                               mail_entries=mail_log.entries(limit=20),
                               mailer_configured=notifier.configured)

    @app.route('/admin/login', methods=['POST'])
    def admin_login():
        username = request.form.get('username', '')
        password = request.form.get('password', '')

        if (settings.admin_configured
                and username == settings.admin_username
                and password == settings.admin_password):
            login_user(AdminUser(username))
            logger.info(f"Admin {username} logged in")
            return redirect(url_for('admin'))

        logger.warning(f"Failed admin login attempt for {username!r}")
        return render_template('admin_login.html', error='Invalid credentials')

    @app.route('/admin/logout', methods=['POST'])
    def admin_logout():
        logout_user()
        session.clear()
        return redirect(url_for('home'))

    # Admin console
    @app.route('/admin/jobs', methods=['POST'])
    @login_required
    def create_job():
        job = job_store.create_job(
            title=request.form.get('title', ''),
            location=request.form.get('location', ''),
            description=request.form.get('description', ''),
            openings=request.form.get('openings'),
            experience=request.form.get('experience'),
        )
        flash(f'Job "{job.title}" posted', 'success')
        return redirect(url_for('admin'))

    @app.route('/admin/jobs/<job_id>/delete', methods=['POST'])
    @login_required
    def delete_job(job_id):
        """Delete a job and cascade to its applications and resume files"""
        try:
            job_store.delete_job(job_id)
        except StorageError:
            return 'Failed to delete job', 500

        try:
            removed = application_store.delete_applications_for_job(job_id)
        except OSError as e:
            logger.error(f"Error while removing applications for job {job_id}: {e}")
        else:
            flash(f'Job deleted along with {len(removed)} application(s)', 'success')

        return redirect(url_for('admin'))

    @app.route('/admin/applications/<application_id>/delete', methods=['POST'])
    @login_required
    def delete_application(application_id):
        try:
            application_store.delete_application(application_id)
        except OSError as e:
            logger.error(f"Error deleting application {application_id}: {e}")
            return 'Error deleting application', 500

        flash('Application deleted', 'success')
        return redirect(url_for('admin'))

    @app.route('/admin/applications/<application_id>/reject', methods=['POST'])
    @login_required
    def reject_application(application_id):
        """Notify the applicant, then delete the application and its resume"""
        application = application_store.get_application(application_id)
        if not application:
            logger.error(f"Application not found for rejection: {application_id}")
            return redirect(url_for('admin'))

        job = job_store.get_job(application.jobId)
        job_title = job.title if job else 'a job'

        notifier.send_rejection(application, job_title)

        try:
            application_store.delete_application(application_id)
        except OSError as e:
            logger.error(f"Error removing rejected application {application_id}: {e}")
            flash('Rejection email handled, but the application could not be removed', 'error')
            return redirect(url_for('admin'))

        logger.info(f"Application rejected and deleted: {application_id}")
        flash(f'Application from {application.name} rejected', 'success')
        return redirect(url_for('admin'))
