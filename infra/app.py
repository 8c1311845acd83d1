"""
infra/app.py -- CDK app entry point.

cdk.json runs this module (python -m infra.app). The account and region come
from the CDK CLI's own CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION variables.
"""

import os
from typing import Optional

import aws_cdk as cdk

from infra.user_pool_client_stack import UserPoolClientStack
from infra.user_pool_stack import UserPoolStack


def build_app(app: Optional[cdk.App] = None) -> cdk.App:
    """Add both stacks to app (a new cdk.App by default) and return it."""
    app = app or cdk.App()
    env = cdk.Environment(
        account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=os.environ.get("CDK_DEFAULT_REGION"),
    )

    pool_stack = UserPoolStack(app, "UserPoolStack", env=env)
    client_stack = UserPoolClientStack(
        app,
        "UserPoolClientStack",
        user_pool=pool_stack.user_pool,
        env=env,
    )
    client_stack.add_dependency(pool_stack)
    return app


if __name__ == "__main__":
    build_app().synth()
