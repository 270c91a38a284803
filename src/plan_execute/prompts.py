"""Prompts used by the planner, replanner and execution agent."""

# --- Planner prompt -------------------------------------------------------

PLANNER_PROMPT = """For the given objective, come up with a simple step by step plan. \
This plan should involve individual tasks, that if executed correctly will yield the correct answer. \
Do not add any superfluous steps. \
The result of the final step should be the final answer. \
Make sure that each step has all the information needed - do not skip steps.

{objective}"""

# --- Replanner prompt -----------------------------------------------------

REPLANNER_PROMPT = """For the given objective, come up with a simple step by step plan. \
This plan should involve individual tasks, that if executed correctly will yield the correct answer. \
Do not add any superfluous steps. \
The result of the final step should be the final answer. \
Make sure that each step has all the information needed - do not skip steps.

Your objective was this:
{objective}

Your remaining plan is this:
{plan}

You have currently done the following steps:
{past_steps}

Update your plan accordingly. If no more steps are needed and you can return to the user, \
then respond with that and use the 'Response' function. \
Otherwise, fill out the plan using the 'Plan' function. \
Only add steps to the plan that still NEED to be done. Do not return previously done steps as part of the plan."""

# --- Execution agent prompt -----------------------------------------------

EXECUTOR_PROMPT = """You are a helpful assistant carrying out one step of a larger plan.
Use the search tool whenever the step needs facts you are not certain about, \
and finish with a short, direct statement of the result.

System time: {system_time}"""
