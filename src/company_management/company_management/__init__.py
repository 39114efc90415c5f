"""Company Management package.

Feature modules (users, tasks, attendance, salary, requests, ...) share one
access-decision module and sit behind a thin Flask JSON controller layer with
service/repository layers underneath.
"""
