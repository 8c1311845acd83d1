"""
infra/user_pool_stack.py -- The Cognito user pool (the user directory).

Users sign in with their email address only; there is no separate username.
Anyone may register, and account recovery goes through the verified email.
Password policy, token issuance and federation are Cognito's defaults.

Outputs:
  UserPoolArnOutput  (export HtmxtodoUserPoolArn)
  UserPoolIdOutput   (export HtmxtodoUserPoolId)
"""

import aws_cdk as cdk
from aws_cdk import aws_cognito as cognito
from constructs import Construct

USER_POOL_NAME = "HtmxtodoUserPool"
USER_POOL_ARN_EXPORT = "HtmxtodoUserPoolArn"
USER_POOL_ID_EXPORT = "HtmxtodoUserPoolId"


class UserPoolStack(cdk.Stack):
    """Declares the user pool and exposes it as self.user_pool for other stacks."""

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.user_pool = cognito.UserPool(
            self,
            "UserPool",
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            sign_in_aliases=cognito.SignInAliases(email=True, username=False),
            user_pool_name=USER_POOL_NAME,
            self_sign_up_enabled=True,
        )

        # Not consumed yet; exported so IAM policies in other stacks can reference the pool.
        cdk.CfnOutput(
            self,
            "UserPoolArnOutput",
            value=self.user_pool.user_pool_arn,
            export_name=USER_POOL_ARN_EXPORT,
        )
        cdk.CfnOutput(
            self,
            "UserPoolIdOutput",
            value=self.user_pool.user_pool_id,
            export_name=USER_POOL_ID_EXPORT,
        )
