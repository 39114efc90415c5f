from __future__ import annotations

from flask import Flask, request, send_file

from ..common.http import auth_guard, current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    @app.route("/api/tasks", methods=["GET"], endpoint="list_tasks")
    @auth_required
    def list_tasks():
        tasks = container.task_service.list_visible(current_actor(), status=request.args.get("status"))
        return ok(count=len(tasks), data=[t.to_public() for t in tasks])

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @auth_required
    def create_task():
        data = json_body()
        task = container.task_service.create(
            current_actor(),
            title=data.get("title"),
            assigned_to=data.get("assigned_to", data.get("assignedTo")),
            description=data.get("description"),
            priority=data.get("priority"),
            due_date=data.get("due_date", data.get("dueDate")),
        )
        return ok(201, data=task.to_public())

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="get_task")
    @auth_required
    def get_task(task_id: int):
        return ok(data=container.task_service.get(current_actor(), task_id).to_public())

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="update_task")
    @auth_required
    def update_task(task_id: int):
        task = container.task_service.update(current_actor(), task_id, json_body())
        return ok(data=task.to_public())

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="delete_task")
    @auth_required
    def delete_task(task_id: int):
        container.task_service.delete(current_actor(), task_id)
        return ok(message="Task deleted")

    @app.route("/api/tasks/<int:task_id>/complete", methods=["POST"], endpoint="complete_task")
    @auth_required
    def complete_task(task_id: int):
        task, submission = container.task_service.complete_with_submission(
            current_actor(), task_id, request.files.get("completionFile")
        )
        return ok(message="Task completed", data=task.to_public(), submission=submission.to_public())

    @app.route("/api/tasks/<int:task_id>/submission", methods=["GET"], endpoint="get_task_submission")
    @auth_required
    def get_task_submission(task_id: int):
        return ok(data=container.task_service.get_submission(current_actor(), task_id).to_public())

    @app.route("/api/tasks/<int:task_id>/submission/download", methods=["GET"], endpoint="download_task_submission")
    @auth_required
    def download_task_submission(task_id: int):
        submission = container.task_service.submission_file(current_actor(), task_id)
        return send_file(submission.file_path, as_attachment=True, download_name=submission.file_name)
