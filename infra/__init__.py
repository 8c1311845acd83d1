"""infra/ -- AWS CDK stacks that provision the Cognito user pool and app client.

Deploy with the CDK CLI from the repository root (cdk.json points at
infra.app):  cdk deploy --all

The stack exports feed the web app's configuration:
  HtmxtodoUserPoolId        -> COGNITO_USER_POOL_ID
  HtmxtodoUserPoolClientId  -> COGNITO_CLIENT_ID

Layer rule: infra/ imports nothing from the application packages.
"""
