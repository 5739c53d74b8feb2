from __future__ import annotations

# Easy Apply modal
EASY_APPLY_CONTENT = ".jobs-easy-apply-content"
FORM_SECTION = ".jobs-easy-apply-form-section__grouping"
FORM_ELEMENT = ".jobs-easy-apply-form-element"
FILE_INPUT = "input[type='file']"
FORM_CONTROLS = "input, select, textarea"
TEXT_INPUTS = (
    "input:not([type='checkbox']):not([type='radio']):not([type='submit'])"
    ":not([type='button']):not([type='file']):not([type='hidden'])"
)
TEXTAREA = "textarea"
LABEL = "label"
SELECT = "select"
OPTION = "option"
CHECKED_OPTION = "option:checked"
CHECKBOX_FIELDSET = "fieldset[data-test-checkbox-form-component='true']"
CHECKBOX_INPUT = "input[type='checkbox']"
RADIO_FIELDSET = "fieldset[data-test-form-builder-radio-button-form-component='true']"
RADIO_OPTION = "div.fb-text-selectable__option"
RADIO_LEGEND = (
    "legend span.fb-dash-form-element__label-title--is-required, "
    "legend span.fb-dash-form-element__label"
)
INPUT = "input"
DATE_INPUT = ".artdeco-datepicker__input"
INLINE_ERROR = ".artdeco-inline-feedback--error"
GROUP_TITLE = ".jobs-easy-apply-form-section__group-title"
GROUP_SUBTITLE = ".jobs-easy-apply-form-section__group-subtitle"
PRIMARY_BUTTON = ".artdeco-button--primary"
UNFOLLOW_LABEL = "//label[contains(., 'to stay up to date with their page.')]"
SAFETY_TIPS_MODAL = ".job-trust-pre-apply-safety-tips-modal__content"
CONTINUE_APPLYING_BUTTON = "button.jobs-apply-button"
MODAL_DISMISS = ".artdeco-modal__dismiss"
MODAL_CONFIRM_DISCARD = ".artdeco-modal__confirm-dialog-btn"
PARENT = ".."

# Job page
EASY_APPLY_BUTTON = "//button[contains(@class, 'jobs-apply-button') and contains(., 'Easy Apply')]"
SEE_MORE_BUTTON = "//button[@aria-label='Click to see more description' and @aria-expanded='false']"
JOB_DESCRIPTION = ".jobs-description-content__text"
HIRING_TEAM_LINKS = "//h2[contains(., 'Meet the hiring team')]/following::a[contains(@href, 'linkedin.com/in/')]"

# Search results
NO_RESULTS_BANNER = ".jobs-search-two-pane__no-results-banner--expand"
RESULTS_LIST = ".jobs-search-results-list"
RESULTS_CONTAINER = ".scaffold-layout__list-container"
JOB_CARD = ".job-card-container"
JOB_TILE = ".jobs-search-results__list-item"
JOB_TILE_TITLE = ".job-card-list__title"
JOB_TILE_COMPANY = ".job-card-container__primary-description"
JOB_TILE_LOCATION = ".job-card-container__metadata-item"
JOB_TILE_APPLY_METHOD = ".job-card-container__apply-method"

# Login
FEED_MARKER = "share-box-feed-entry__trigger"
USERNAME_FIELD = "username"
PASSWORD_FIELD = "password"
SUBMIT_BUTTON = "//button[@type='submit']"
