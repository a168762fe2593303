"""
Maternity Readmission Simulator - Streamlit Dashboard

Cohort overview, what-if risk prediction and subgroup fairness audit.

Run with:
    streamlit run app/streamlit_app.py
"""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from maternity_readmission.cohort import DeliveryType, Location, cohort_to_frame
from maternity_readmission.config import SimulationConfig
from maternity_readmission.fairness_audit import generate_audit_report
from maternity_readmission.pipeline import ReadmissionPipeline
from maternity_readmission.risk_assessment import PatientProfile, RiskLevel, assess_patient

# Page config
st.set_page_config(
    page_title="Maternity Readmission Risk",
    page_icon="hospital",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #4f46e5;
        text-align: center;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)

RISK_COLORS = {
    RiskLevel.LOW: '#10b981',
    RiskLevel.MODERATE: '#f59e0b',
    RiskLevel.HIGH: '#f43f5e',
}


@st.cache_resource
def run_pipeline(cohort_size: int, seed: int, learning_rate: float, iterations: int, threshold: float):
    """Generate, train and audit once per parameter combination."""
    config = SimulationConfig(
        cohort_size=cohort_size,
        seed=seed,
        learning_rate=learning_rate,
        iterations=iterations,
        bias_threshold=threshold
    )
    return ReadmissionPipeline(config).run()


def show_overview(result):
    summary = result.summary
    df = cohort_to_frame(result.cohort)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total Patients", summary.total)
    with col2:
        st.metric("Readmission Rate", f"{summary.readmission_rate:.1%}")
    with col3:
        st.metric("Cesarean Deliveries", summary.cesarean_count)
    with col4:
        st.metric("Mean Age", f"{summary.mean_age:.1f}")

    col1, col2 = st.columns(2)
    with col1:
        age_df = pd.DataFrame({
            'Age Band': list(summary.age_distribution.keys()),
            'Patients': list(summary.age_distribution.values())
        })
        fig = px.bar(age_df, x='Age Band', y='Patients', title="Age Distribution")
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        delivery_df = pd.DataFrame([
            {'Delivery Type': name, 'Readmission Rate (%)': stats['rate'] * 100}
            for name, stats in summary.delivery_stats.items()
        ])
        fig = px.bar(delivery_df, x='Delivery Type', y='Readmission Rate (%)',
                     title="Readmission Rate by Delivery Type")
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Sample Records")
    st.dataframe(df.head(20), use_container_width=True)


def show_prediction(result):
    col1, col2 = st.columns(2)

    with col1:
        age = st.slider("Age", min_value=18, max_value=45, value=28)
        delivery_type = st.selectbox("Delivery Type", [d.value for d in DeliveryType])
        location = st.selectbox("Location", [loc.value for loc in Location])
        labor_duration = st.slider("Labor Duration (hours)", min_value=1, max_value=24, value=12)
        los = st.slider("Length of Stay (days)", min_value=1, max_value=10, value=3)
        complications = st.checkbox("Complications during delivery?")

    profile = PatientProfile(
        age=age,
        delivery_type=delivery_type,
        labor_duration_hours=labor_duration,
        has_complications=complications,
        length_of_stay_days=los,
        location=location
    )

    with col2:
        if st.button("Calculate Risk Score", type="primary", use_container_width=True):
            assessment = assess_patient(result.model, profile)
            fig = go.Figure(go.Indicator(
                mode="gauge+number",
                value=assessment.probability * 100,
                number={'suffix': "%"},
                title={'text': assessment.risk_level.value},
                gauge={
                    'axis': {'range': [0, 100]},
                    'bar': {'color': RISK_COLORS[assessment.risk_level]},
                }
            ))
            st.plotly_chart(fig, use_container_width=True)
            st.info(assessment.recommendation)


def show_audit(result):
    audit = result.audit

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Training Accuracy", f"{audit.overall_accuracy:.1f}%")
    with col2:
        st.metric("Majority Baseline", f"{audit.majority_baseline:.1f}%")
    with col3:
        st.metric("Bias Detected", "YES" if audit.bias_detected else "NO")

    for disparity in audit.disparities:
        groups = [disparity.group_a, disparity.group_b]
        fig = go.Figure(data=[
            go.Bar(
                x=[g.name for g in groups],
                y=[g.accuracy if g.has_data else 0 for g in groups],
                text=[f"{g.accuracy:.1f}%" if g.has_data else "no data" for g in groups],
                marker_color='#6366f1'
            )
        ])
        fig.update_layout(
            title=f"Accuracy by {disparity.axis}",
            yaxis_title="Accuracy (%)",
            yaxis_range=[0, 100],
            height=350
        )
        st.plotly_chart(fig, use_container_width=True)

        if disparity.difference is None:
            st.warning(f"{disparity.axis}: a subgroup has no records, gap not reportable")
        elif disparity.exceeds_threshold:
            st.error(f"{disparity.axis}: gap of {disparity.difference:.1f} points exceeds "
                     f"{disparity.threshold:.0f}")
        else:
            st.success(f"{disparity.axis}: gap of {disparity.difference:.1f} points")

    with st.expander("View Detailed Audit Report"):
        st.code(generate_audit_report(audit))


def main():
    st.markdown('<div class="main-header">Maternity Readmission Risk Simulator</div>',
                unsafe_allow_html=True)
    st.markdown("*Synthetic cohort, logistic regression classifier and subgroup fairness audit*")

    with st.sidebar:
        st.header("Configuration")
        cohort_size = st.number_input("Cohort Size", min_value=50, max_value=5000, value=500, step=50)
        seed = st.number_input("Random Seed", min_value=0, value=42, step=1)
        learning_rate = st.select_slider("Learning Rate", options=[0.05, 0.1, 0.25, 0.5, 1.0], value=0.5)
        iterations = st.select_slider("Iterations", options=[0, 250, 500, 1000, 2000, 5000], value=2000)
        threshold = st.slider("Bias Threshold (points)", min_value=1.0, max_value=30.0, value=10.0)

    result = run_pipeline(int(cohort_size), int(seed), float(learning_rate), int(iterations), float(threshold))

    tab1, tab2, tab3 = st.tabs(["Cohort Overview", "Risk Prediction", "Fairness Audit"])

    with tab1:
        st.header("Cohort Overview")
        show_overview(result)

    with tab2:
        st.header("What-If Risk Prediction")
        show_prediction(result)

    with tab3:
        st.header("Fairness Audit")
        show_audit(result)

    st.markdown("---")
    st.markdown(
        "<div style='text-align: center; color: #666;'>"
        "Synthetic data only. Accuracy is measured on the training cohort."
        "</div>",
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
