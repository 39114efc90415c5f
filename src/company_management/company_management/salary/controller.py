from __future__ import annotations

from flask import Flask, request

from ..common.http import auth_guard, current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth_required = auth_guard(container.auth_service)

    @app.route("/api/salaries", methods=["GET"], endpoint="list_salaries")
    @auth_required
    def list_salaries():
        salaries = container.salary_service.list_visible(
            current_actor(), month=request.args.get("month"), year=request.args.get("year")
        )
        return ok(count=len(salaries), data=[s.to_public() for s in salaries])

    @app.route("/api/salaries", methods=["POST"], endpoint="create_salary")
    @auth_required
    def create_salary():
        salary = container.salary_service.create(current_actor(), json_body())
        return ok(201, data=salary.to_public())

    @app.route("/api/salaries/my-salary", methods=["GET"], endpoint="my_salary")
    @auth_required
    def my_salary():
        salaries = container.salary_service.list_mine(
            current_actor(), month=request.args.get("month"), year=request.args.get("year")
        )
        return ok(count=len(salaries), data=[s.to_public() for s in salaries])

    @app.route("/api/salaries/<int:salary_id>", methods=["GET"], endpoint="get_salary")
    @auth_required
    def get_salary(salary_id: int):
        return ok(data=container.salary_service.get(current_actor(), salary_id).to_public())

    @app.route("/api/salaries/<int:salary_id>", methods=["PUT"], endpoint="update_salary")
    @auth_required
    def update_salary(salary_id: int):
        salary = container.salary_service.update(current_actor(), salary_id, json_body())
        return ok(data=salary.to_public())

    @app.route("/api/salaries/<int:salary_id>", methods=["DELETE"], endpoint="delete_salary")
    @auth_required
    def delete_salary(salary_id: int):
        container.salary_service.delete(current_actor(), salary_id)
        return ok(message="Salary record deleted")
