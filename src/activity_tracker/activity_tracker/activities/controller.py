from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.web import json_error, json_ok, request_payload, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .service import ActivitySubmission, CertificateUpload


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activities", methods=["POST"], endpoint="submit_activity")
    @roles_required(Role.STUDENT)
    def submit_activity():
        form = request.form
        upload = request.files.get("certificate")
        certificate = None
        if upload is not None and upload.filename:
            certificate = CertificateUpload(filename=upload.filename, data=upload.read())

        receipt = container.activity_service.submit_activity(
            g.requester,
            ActivitySubmission(
                activity_type=form.get("activityType"),
                title=form.get("title"),
                description=form.get("description"),
                date=form.get("date"),
                event_organizer=form.get("eventOrganizer"),
                level=form.get("level"),
            ),
            certificate,
        )
        return json_ok(
            receipt.activity.to_dict(),
            status=201,
            teacherCount=receipt.teacher_count,
            message=receipt.message,
        )

    @app.route("/api/activities", methods=["GET"], endpoint="my_activities")
    @roles_required(Role.STUDENT)
    def my_activities():
        activities = container.activity_service.list_own_activities(g.requester)
        return json_ok([a.to_dict() for a in activities], count=len(activities))

    @app.route("/api/activities/pending", methods=["GET"], endpoint="pending_activities")
    @roles_required(Role.TEACHER)
    def pending_activities():
        queue = container.activity_service.list_pending_for_scope(g.requester)
        return json_ok(
            [a.to_dict() for a in queue.activities],
            count=len(queue.activities),
            stats=queue.stats,
        )

    @app.route("/api/activities/<int:activity_id>/review", methods=["PUT"], endpoint="review_activity")
    @roles_required(Role.TEACHER)
    def review_activity(activity_id: int):
        payload = request_payload()
        try:
            activity = container.activity_service.review_activity(
                g.requester,
                activity_id=activity_id,
                status=payload.get("status"),
                points_awarded=payload.get("pointsAwarded"),
                feedback=payload.get("feedback"),
            )
        except (NotFoundError, AuthorizationError):
            return json_error("Activity not found", 404)
        return json_ok(activity.to_dict())

    @app.route("/api/activities/report", methods=["GET"], endpoint="activity_report")
    @roles_required(Role.TEACHER, Role.SUPERADMIN)
    def activity_report():
        report = container.report_service.generate_report(
            g.requester,
            department=request.args.get("department"),
            semester=request.args.get("semester"),
            status=request.args.get("status"),
        )
        return json_ok([row.to_dict() for row in report.rows], count=len(report.rows))

    @app.route("/api/activities/all", methods=["GET"], endpoint="all_activities")
    @roles_required(Role.SUPERADMIN)
    def all_activities():
        activities = container.activity_service.list_all_activities(g.requester)
        return json_ok([a.to_dict() for a in activities], count=len(activities))

    @app.route("/api/activities/<int:activity_id>/certificate", methods=["GET"], endpoint="activity_certificate")
    @roles_required()
    def activity_certificate(activity_id: int):
        try:
            _, path = container.activity_service.certificate_for(g.requester, activity_id)
        except (NotFoundError, AuthorizationError):
            return json_error("Activity not found", 404)
        return send_file(path, as_attachment=False, download_name=path.name)
